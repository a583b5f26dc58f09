"""Run a complete course build from a :class:`~coursegen.config.BuildConfig`.

The phases run in a fixed order and each one finishes before the next
starts:

1. stage source media into the output media directory,
2. load the content tree,
3. first pass: number steps and freeze the symbol tables,
4. derive navigation,
5. write glossary pages and the references page,
6. write step pages and theme pages, theme by theme,
7. write the course index, course map and front page,
8. merge the framework directory,
9. delete unused media and fix media name case,
10. record build metadata.

A fatal :class:`~coursegen.errors.CourseBuildError` stops the build where it
is and leaves any output written so far in place.

Examples
--------
>>> from pathlib import Path
>>> from coursegen.builder import CourseBuilder
>>> from coursegen.config import load_build_config
>>> report = CourseBuilder(load_build_config(Path("config/course.yaml"))).run()  # doctest: +SKIP
>>> report.ok  # doctest: +SKIP
True
"""

from __future__ import annotations

import json
import logging
import shutil
import typing as typ

from coursegen._constants import BUILD_META_FILENAME
from coursegen.diagnostics import BuildReport
from coursegen.errors import OutputWriteError
from coursegen.generator import (
    GlossaryPageEmitter,
    HtmlFormatter,
    MediaGarbageCollector,
    MediaRegistry,
    NavigationBuilder,
    PageGenerator,
    PageWriter,
    ReferenceResolver,
    SiteContext,
    SymbolTableBuilder,
    TemplateRenderer,
)
from coursegen.generator.renderer import DEFAULT_TEMPLATES_DIR
from coursegen.tree import ResourceFilter, load_course

if typ.TYPE_CHECKING:
    from pathlib import Path

    from coursegen.config import BuildConfig
    from coursegen.generator import MediaReport, NavigationFragments, SymbolTables

logger = logging.getLogger(__name__)

DEFAULT_FRAMEWORK_DIR = DEFAULT_TEMPLATES_DIR / "framework"


class CourseBuilder:
    """Build one course package."""

    def __init__(self, config: BuildConfig, report: BuildReport | None = None) -> None:
        self.config = config
        self.report = report or BuildReport()
        self.media_report: MediaReport | None = None

    def run(self) -> BuildReport:
        """Generate the course package described by the configuration.

        Returns
        -------
        BuildReport
            Warnings, notices and every path written.

        Raises
        ------
        CourseBuildError
            When a fatal problem stops the build.
        CourseConfigError
            When course metadata is invalid.
        FileNotFoundError
            When the content tree or its metadata is missing.
        """
        config = self.config
        self.stage_media()

        resource_filter = ResourceFilter(config.filters)
        course = load_course(config.source_dir, resource_filter)
        tables = SymbolTableBuilder(
            self.report, redefines_fatal=config.redefines_fatal
        ).build(course)
        navigation = NavigationBuilder().build(course)

        site = SiteContext(
            course=course,
            media_dir=config.media_dir,
            has_glossary=bool(tables.glossary.visible_entries()),
            has_references=bool(tables.references.cited()),
        )
        formatter = HtmlFormatter(config.tidy, self.report)
        if formatter.enabled:
            formatter.executable()
        registry = MediaRegistry(self.report, media_dir=config.media_dir)
        registry.add_all(course.forcemedia, source="forcemedia")

        renderer = TemplateRenderer(config.templates_dir)
        writer = PageWriter(renderer, formatter, registry, self.report)
        resolver = ReferenceResolver(
            course, tables, renderer, self.report, media_dir=config.media_dir
        )

        GlossaryPageEmitter(config.output_dir, writer, resolver, site, self.report).emit(
            tables.glossary
        )
        pages = PageGenerator(
            config.output_dir, writer, resolver, navigation, site, resource_filter, self.report
        )
        pages.emit_references(tables.references)
        for theme in navigation.themes:
            pages.emit_theme_steps(theme)
            pages.emit_theme_pages(theme)
        pages.emit_course_pages()
        pages.merge_framework(config.framework_dir or DEFAULT_FRAMEWORK_DIR)

        self.media_report = MediaGarbageCollector().reconcile(config.output_media, registry)
        self.write_metadata(navigation, tables)
        logger.info(
            "built %s: %d files, %d warnings",
            config.output_dir,
            len(self.report.written),
            len(self.report.warnings),
        )
        return self.report

    def stage_media(self) -> None:
        """Copy the source media directory into the output package."""
        source = self.config.source_media
        if not source.is_dir():
            self.report.notice(f"No media directory at '{source}'; nothing to stage.")
            return
        try:
            shutil.copytree(source, self.config.output_media, dirs_exist_ok=True)
        except OSError as exc:
            msg = f"Unable to stage media from '{source}': {exc}"
            raise OutputWriteError(msg) from exc
        logger.debug("staged media from %s", source)

    def write_metadata(self, navigation: NavigationFragments, tables: SymbolTables) -> Path:
        """Persist a JSON summary of the build next to the generated pages."""
        first_file = "frontpage.html"
        for theme in navigation.themes:
            if navigation.modules[theme.name]:
                module = navigation.modules[theme.name][0]
                first_file = f"{theme.name}/{module.name}/{module.step_filename(1)}"
                break
        metadata = {
            "first_file": first_file,
            "themes": len(navigation.themes),
            "modules": sum(len(modules) for modules in navigation.modules.values()),
            "steps": tables.step_count,
            "glossary_terms": len(tables.glossary.visible_entries()),
            "references": len(tables.references.cited()),
            "warnings": len(self.report.warnings),
        }
        path = self.config.output_dir / BUILD_META_FILENAME
        try:
            path.write_text(json.dumps(metadata, indent=2), encoding="utf-8")
        except OSError as exc:
            msg = f"Unable to write build metadata '{path}': {exc}"
            raise OutputWriteError(msg) from exc
        return path


def build_course(config: BuildConfig) -> BuildReport:
    """Build the course described by ``config`` and return its report."""
    return CourseBuilder(config).run()


__all__ = ["DEFAULT_FRAMEWORK_DIR", "CourseBuilder", "build_course"]
