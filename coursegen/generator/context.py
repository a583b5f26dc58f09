"""Template context shared by every generated page."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .resolver import level_prefix

if typ.TYPE_CHECKING:
    from pathlib import Path

    from coursegen.diagnostics import BuildReport
    from coursegen.tree.models import Course

    from .formatter import HtmlFormatter
    from .media import MediaRegistry
    from .renderer import TemplateRenderer

COURSE_BASE_MARKER = "{COURSE_BASE}/"


@dc.dataclass(slots=True)
class SiteContext:
    """Course-wide values every page template receives.

    ``has_glossary`` and ``has_references`` decide whether the glossary and
    references links in page headers are enabled.
    """

    course: Course
    media_dir: str
    has_glossary: bool = False
    has_references: bool = False

    def extrahead(self, level: str) -> str:
        """Return the course's extra head markup rebased for ``level``."""
        return self.course.extrahead.replace(COURSE_BASE_MARKER, level_prefix(level))

    def base(self, level: str, **extra: typ.Any) -> dict[str, typ.Any]:
        """Return the common template context for a page at ``level``."""
        context: dict[str, typ.Any] = {
            "course": self.course,
            "level": level,
            "prefix": level_prefix(level),
            "version": self.course.version,
            "extrahead": self.extrahead(level),
            "media_dir": self.media_dir,
            "has_glossary": self.has_glossary,
            "has_references": self.has_references,
        }
        context.update(extra)
        return context


class PageWriter:
    """Render, format, scan and record every generated page the same way."""

    def __init__(
        self,
        renderer: TemplateRenderer,
        formatter: HtmlFormatter,
        registry: MediaRegistry,
        report: BuildReport,
    ) -> None:
        self.renderer = renderer
        self.formatter = formatter
        self.registry = registry
        self.report = report

    def write(self, template: str, path: Path, **context: typ.Any) -> Path:
        """Render ``template`` to ``path``, then format it and scan it for media."""
        self.renderer.write(template, path, **context)
        self.formatter.format(path)
        self.registry.scan_file(path)
        return self.report.wrote(path)


__all__ = ["COURSE_BASE_MARKER", "PageWriter", "SiteContext"]
