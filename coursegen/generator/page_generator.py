"""Render step, theme and course pages for a numbered, resolved course.

:class:`PageGenerator` turns the course tree into files under the output
directory::

    <theme>/<module>/stepNN.html   one page per included step
    <theme>/index.html             theme map (authored maps or a module list)
    <theme>/themeindex.html        text index of modules and steps
    <theme>/outjectives.html       outcomes and objectives, when listed
    courseindex.html               text index of the whole course
    coursemap.html                 course map (authored maps or a theme grid)
    frontpage.html                 splash media and welcome message
    references.html                cited references, when there are any

Every page goes through :class:`~coursegen.generator.context.PageWriter`, so
it is formatted (when enabled), scanned for media and recorded on the build
report in one place.

Example
-------
>>> from coursegen.generator import PageGenerator
>>> generator = PageGenerator(output_dir, writer, resolver, navigation, site)  # doctest: +SKIP
>>> generator.emit_step(theme, module, step)  # doctest: +SKIP
PosixPath('public/networks/basics/step01.html')
"""

from __future__ import annotations

import logging
import shutil
import typing as typ

from markdown import markdown

from coursegen._constants import OUTJECTIVES_PAGE, REFERENCES_PAGE
from coursegen.errors import CourseInfoError, OutputWriteError

from .references import describe_entry
from .renderer import TemplateRenderer, write_text

if typ.TYPE_CHECKING:
    from pathlib import Path

    from coursegen.diagnostics import BuildReport
    from coursegen.tree.filters import ResourceFilter
    from coursegen.tree.models import CourseInfo, MapFragment, Module, Step, Theme

    from .context import PageWriter, SiteContext
    from .navigation import NavigationFragments
    from .references import ReferenceTable
    from .resolver import ReferenceResolver

logger = logging.getLogger(__name__)


class PageGenerator:
    """Write every page of the course package."""

    def __init__(
        self,
        output_dir: Path,
        writer: PageWriter,
        resolver: ReferenceResolver,
        navigation: NavigationFragments,
        site: SiteContext,
        resource_filter: ResourceFilter,
        report: BuildReport,
    ) -> None:
        """Initialize the generator.

        Parameters
        ----------
        output_dir : Path
            Root of the generated course package.
        writer : PageWriter
            Renders templates to disk and records each page.
        resolver : ReferenceResolver
            Converts bracket tags in step bodies and authored maps.
        navigation : NavigationFragments
            Ordered themes, modules and steps with dropdown helpers.
        site : SiteContext
            Course-wide template values.
        resource_filter : ResourceFilter
            Active filters, applied to maps and course information blocks.
        report : BuildReport
            Receives notices and warnings.
        """
        self.output_dir = output_dir
        self.writer = writer
        self.resolver = resolver
        self.navigation = navigation
        self.site = site
        self.resource_filter = resource_filter
        self.report = report
        self._unknown_modules: set[tuple[str, str, str]] = set()

    # Steps

    def emit_step(self, theme: Theme, module: Module, step: Step) -> Path:
        """Resolve and write one included step page."""
        output_id = step.output_id
        if output_id is None:
            msg = f"Step '{step.filename}' in {theme.name}/{module.name} is not numbered."
            raise ValueError(msg)
        if step.outjectives:
            body = self.writer.renderer.macros("outjectives.jinja").module_page(module)
        else:
            body = self.resolver.resolve(step.body, theme.name, module.name, output_id)
        context = self.site.base(
            "step",
            title=step.title,
            theme=theme,
            module=module,
            step=step,
            body=body,
            stepnav=self.navigation.step_navigation(theme.name, module, output_id),
            theme_dropdown=self.navigation.theme_dropdown(theme.name, view="step"),
            module_dropdown=self.navigation.module_dropdown(theme.name, module),
            step_dropdown=self.navigation.step_dropdown(theme.name, module, output_id),
        )
        path = self.output_dir / theme.name / module.name / module.step_filename(output_id)
        return self.writer.write("step.jinja", path, **context)

    def emit_theme_steps(self, theme: Theme) -> list[Path]:
        """Write every included step of ``theme`` in navigation order."""
        written: list[Path] = []
        for module in self.navigation.modules[theme.name]:
            for step in self.navigation.steps[(theme.name, module.name)]:
                written.append(self.emit_step(theme, module, step))
        return written

    # Theme pages

    def emit_theme_pages(self, theme: Theme) -> list[Path]:
        """Write the theme map, the theme text index and any outcomes page."""
        theme_dir = self.output_dir / theme.name
        dropdown = self.navigation.theme_dropdown(theme.name, view="theme")

        body = self._filtered_maps(theme.maps, level="theme", label=f"theme '{theme.name}'")
        modules = self.module_entries(theme, level="theme")
        map_context = self.site.base(
            "theme",
            title=theme.title,
            theme=theme,
            body=body,
            modules=modules,
            theme_dropdown=dropdown,
        )
        index_context = self.site.base(
            "theme",
            title=theme.title,
            theme=theme,
            modules=modules,
            theme_dropdown=dropdown,
        )
        written = [
            self.writer.write("theme_map.jinja", theme_dir / "index.html", **map_context),
            self.writer.write(
                "theme_index.jinja", theme_dir / "themeindex.html", **index_context
            ),
        ]
        if theme.has_outjectives:
            written.append(self.emit_theme_outjectives(theme))
        return written

    def emit_theme_outjectives(self, theme: Theme) -> Path:
        """Write the theme's outcomes and objectives with those of its modules."""
        modules = [
            {
                "name": module.name,
                "title": module.title,
                "level": module.level,
                "types": module.outjectives_title,
                "href": f"{module.name}/{module.step_filename(1)}",
                "node": module,
            }
            for module in self.navigation.modules[theme.name]
            if module.has_outjectives
        ]
        context = self.site.base(
            "theme",
            title="Outcomes and Objectives",
            theme=theme,
            modules=modules,
            theme_dropdown=self.navigation.theme_dropdown(theme.name, view="theme"),
        )
        return self.writer.write(
            "theme_outjectives.jinja", self.output_dir / theme.name / OUTJECTIVES_PAGE, **context
        )

    def module_entries(self, theme: Theme, *, level: str) -> list[dict[str, typ.Any]]:
        """Describe each included module of ``theme`` for an index page.

        Links are relative to a theme page when ``level`` is ``"theme"`` and
        to the course root when it is ``"course"``.
        """
        base = "" if level == "theme" else f"{theme.name}/"
        modules = self.navigation.modules[theme.name]
        known = {module.name: module for module in modules}
        entries: list[dict[str, typ.Any]] = []
        for module in modules:
            anchor = module.name if level == "theme" else f"{theme.name}-{module.name}"
            steps = [
                {
                    "title": step.title,
                    "href": f"{base}{module.name}/{module.step_filename(step.output_id or 0)}",
                }
                for step in self.navigation.steps[(theme.name, module.name)]
            ]
            entries.append(
                {
                    "name": module.name,
                    "anchor": anchor,
                    "title": module.title,
                    "level": module.level,
                    "difficulty": module.difficulty,
                    "href": steps[0]["href"],
                    "steps": steps,
                    "prerequisites": self._dependencies(
                        theme, module, module.prerequisites, known, level
                    ),
                    "leadsto": self._dependencies(theme, module, module.leadsto, known, level),
                }
            )
        return entries

    def _dependencies(
        self,
        theme: Theme,
        module: Module,
        targets: list[str],
        known: dict[str, Module],
        level: str,
    ) -> list[dict[str, str]]:
        links: list[dict[str, str]] = []
        for name in sorted(targets):
            target = known.get(name)
            if target is None:
                key = (theme.name, module.name, name)
                if name not in theme.modules and key not in self._unknown_modules:
                    self._unknown_modules.add(key)
                    self.report.warn(
                        f"Module '{module.name}' in theme '{theme.name}' refers to "
                        f"unknown module '{name}'."
                    )
                continue
            anchor = name if level == "theme" else f"{theme.name}-{name}"
            links.append({"href": f"#{anchor}", "title": target.title})
        return links

    # Course pages

    def emit_course_pages(self) -> list[Path]:
        """Write the course index, course map and front page."""
        return [
            self.emit_course_index(),
            self.emit_course_map(),
            self.emit_frontpage(),
        ]

    def emit_course_index(self) -> Path:
        themes = [
            {
                "name": theme.name,
                "title": theme.title,
                "modules": self.module_entries(theme, level="course"),
            }
            for theme in self.navigation.themes
        ]
        context = self.site.base(
            "course",
            title=f"{self.site.course.title} course index",
            themes=themes,
        )
        return self.writer.write("course_index.jinja", self.output_dir / "courseindex.html", **context)

    def emit_course_map(self) -> Path:
        body = self._filtered_maps(self.site.course.maps, level="course", label="course")
        context = self.site.base(
            "course",
            title=self.site.course.title,
            body=body,
            rows=self.course_map_rows(),
        )
        return self.writer.write("course_map.jinja", self.output_dir / "coursemap.html", **context)

    def course_map_rows(self) -> list[list[dict[str, str]]]:
        """Lay the included themes out two per row.

        With an odd number of themes the first row holds a single cell.
        """
        cells = [
            {"title": theme.title, "href": f"{theme.name}/index.html", "name": theme.name}
            for theme in self.navigation.themes
        ]
        rows: list[list[dict[str, str]]] = []
        if len(cells) % 2:
            rows.append([cells.pop(0)])
        rows.extend(cells[index : index + 2] for index in range(0, len(cells), 2))
        return rows

    def emit_frontpage(self) -> Path:
        """Write the splash page from the first course information block in scope.

        Raises
        ------
        CourseInfoError
            If no course information block passes the active filters.
        """
        info = self._courseinfo()
        if info.splash:
            self.writer.registry.add(info.splash, source="frontpage")
        context = self.site.base(
            "course",
            title=self.site.course.title,
            info=info,
            message=markdown(info.message) if info.message else "",
        )
        return self.writer.write("frontpage.jinja", self.output_dir / "frontpage.html", **context)

    def _courseinfo(self) -> CourseInfo:
        for info in self.site.course.courseinfo:
            if self.resource_filter.includes(info.filters):
                return info
            self.report.notice("Course information block excluded by filter rule.")
        msg = "No course information block is available for the active filters."
        raise CourseInfoError(msg)

    def _filtered_maps(self, maps: list[MapFragment], *, level: str, label: str) -> str:
        parts: list[str] = []
        for fragment in maps:
            if not self.resource_filter.includes(fragment.filters):
                preview = " ".join(fragment.html.split())[:24]
                self.report.notice(f"Map '{preview}...' for {label} excluded by filter rule.")
                continue
            parts.append(self.resolver.resolve(fragment.html, level=level))
        return "".join(parts)

    # References

    def emit_references(self, references: ReferenceTable) -> Path | None:
        """Write ``references.html`` when any included step cites a reference."""
        cited = references.cited()
        if not cited:
            return None
        entries: list[dict[str, typ.Any]] = []
        for entry in cited:
            if entry.definition is None:
                self.report.warn(f"Reference '{entry.ref_id}' is cited but never defined.")
            described = describe_entry(entry)
            described["backlinks"] = [
                {
                    "number": number,
                    "href": self._step_href(location.theme, location.module, location.output_id),
                    "title": location.title,
                }
                for number, location in enumerate(entry.citations, start=1)
            ]
            entries.append(described)
        context = self.site.base("course", title="References", entries=entries)
        return self.writer.write("references.jinja", self.output_dir / REFERENCES_PAGE, **context)

    def _step_href(self, theme: str, module: str, output_id: int | None) -> str:
        node = self.site.course.themes[theme].modules[module]
        return f"{theme}/{module}/{node.step_filename(output_id or 0)}"

    # Framework

    def merge_framework(self, framework_dir: Path) -> list[Path]:
        """Copy a framework directory into the output.

        Directories and plain files are copied as they are. ``*.jinja`` files
        are rendered with the course context and written as ``.html``.
        """
        if not framework_dir.is_dir():
            msg = f"Framework directory '{framework_dir}' does not exist."
            raise OutputWriteError(msg)
        renderer = TemplateRenderer(framework_dir)
        written: list[Path] = []
        for entry in sorted(framework_dir.iterdir()):
            if entry.name.startswith("."):
                continue
            target = self.output_dir / entry.name
            try:
                if entry.is_dir():
                    shutil.copytree(entry, target, dirs_exist_ok=True)
                elif entry.suffix == ".jinja":
                    html = renderer.render(entry.name, **self.site.base("course"))
                    target = write_text(target.with_suffix(".html"), html)
                    self.writer.registry.scan_file(target)
                    written.append(self.report.wrote(target))
                else:
                    self.output_dir.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(entry, target)
            except OSError as exc:
                msg = f"Unable to merge framework entry '{entry}': {exc}"
                raise OutputWriteError(msg) from exc
        logger.debug("merged framework from %s", framework_dir)
        return written


__all__ = ["PageGenerator"]
