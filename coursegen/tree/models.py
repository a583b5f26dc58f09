"""Dataclasses describing a loaded course content tree.

A :class:`Course` owns :class:`Theme` nodes, themes own :class:`Module`
nodes and modules own :class:`Step` nodes keyed by source filename. Every node
carries an ``excluded`` flag; the symbol table builder propagates exclusion
from parents to children and assigns ``Step.output_id`` to the steps that
remain.
"""

from __future__ import annotations

import dataclasses as dc
import re

from coursegen._constants import MIN_STEP_WIDTH
from coursegen.errors import MissingIndexOrderError

from .filters import ResourceFilters

_STEP_NUMBER = re.compile(r"(\d+)")


def step_sort_key(filename: str) -> tuple[int, int, str]:
    """Order step filenames by their first embedded integer.

    ``step2.html`` sorts before ``step10.html``. Names without a number sort
    after numbered ones, alphabetically.
    """
    match = _STEP_NUMBER.search(filename)
    if match is None:
        return (1, 0, filename)
    return (0, int(match.group(1)), filename)


@dc.dataclass(frozen=True, slots=True)
class Location:
    """Where a symbol was seen: the step that defined or referenced it."""

    theme: str
    module: str
    source: str
    output_id: int | None = None
    title: str = ""

    def __str__(self) -> str:
        return f"{self.theme}/{self.module}/{self.source}"


@dc.dataclass(slots=True)
class MapFragment:
    """An authored HTML map block, shown only when it passes the filters."""

    html: str
    filters: ResourceFilters = dc.field(default_factory=ResourceFilters)


@dc.dataclass(slots=True)
class CourseInfo:
    """Front page content: splash media and a markdown message."""

    splash: str | None = None
    width: int | None = None
    height: int | None = None
    media_type: str = "image"
    message: str = ""
    filters: ResourceFilters = dc.field(default_factory=ResourceFilters)


@dc.dataclass(slots=True)
class Step:
    """One authored step page."""

    filename: str
    title: str
    body: str
    filters: ResourceFilters = dc.field(default_factory=ResourceFilters)
    excluded: bool = False
    output_id: int | None = None
    outjectives: bool = False


@dc.dataclass(slots=True)
class Module:
    """A module: an ordered run of steps inside a theme."""

    name: str
    title: str
    level: str = ""
    indexorder: int | None = None
    prerequisites: list[str] = dc.field(default_factory=list)
    leadsto: list[str] = dc.field(default_factory=list)
    filters: ResourceFilters = dc.field(default_factory=ResourceFilters)
    excluded: bool = False
    objectives: list[str] = dc.field(default_factory=list)
    outcomes: list[str] = dc.field(default_factory=list)
    steps: dict[str, Step] = dc.field(default_factory=dict)
    step_width: int = MIN_STEP_WIDTH

    def ordered_steps(self) -> list[Step]:
        """Return every step in numeric filename order.

        The generated outcomes and objectives step, when present, comes first.
        """
        return sorted(
            self.steps.values(),
            key=lambda step: (not step.outjectives, step_sort_key(step.filename)),
        )

    def included_steps(self) -> list[Step]:
        """Return the numbered steps ordered by ``output_id``."""
        numbered = [
            step
            for step in self.steps.values()
            if not step.excluded and step.output_id is not None
        ]
        return sorted(numbered, key=lambda step: step.output_id or 0)

    def step_filename(self, output_id: int) -> str:
        """Return the output filename for step ``output_id`` in this module."""
        return f"step{output_id:0{self.step_width}d}.html"

    @property
    def difficulty(self) -> str:
        """Return the level with an upper-cased first letter."""
        return self.level[:1].upper() + self.level[1:]

    @property
    def has_outjectives(self) -> bool:
        return bool(self.objectives or self.outcomes)

    @property
    def outjectives_title(self) -> str:
        """Name the outcomes and objectives page after what the module lists.

        Examples
        --------
        >>> Module(name="m", title="M", outcomes=["x"], objectives=["y"]).outjectives_title
        'Outcomes and Objectives'
        """
        parts = [
            label
            for label, items in (("Outcomes", self.outcomes), ("Objectives", self.objectives))
            if items
        ]
        return " and ".join(parts)


@dc.dataclass(slots=True)
class Theme:
    """A theme: a group of modules with its own index pages."""

    name: str
    title: str
    indexorder: int | None = None
    filters: ResourceFilters = dc.field(default_factory=ResourceFilters)
    excluded: bool = False
    maps: list[MapFragment] = dc.field(default_factory=list)
    objectives: list[str] = dc.field(default_factory=list)
    outcomes: list[str] = dc.field(default_factory=list)
    modules: dict[str, Module] = dc.field(default_factory=dict)

    @property
    def has_outjectives(self) -> bool:
        """Return True when the theme or an included module lists outcomes or objectives."""
        if self.objectives or self.outcomes:
            return True
        return any(
            module.has_outjectives
            for module in self.modules.values()
            if not module.excluded
        )

    def ordered_modules(self) -> list[Module]:
        """Return the included modules ordered by ``indexorder``.

        Raises
        ------
        MissingIndexOrderError
            If an included module has no ``indexorder``.
        """
        included = [module for module in self.modules.values() if not module.excluded]
        for module in included:
            if module.indexorder is None:
                msg = (
                    f"Module '{module.name}' in theme '{self.name}' "
                    "has no indexorder set."
                )
                raise MissingIndexOrderError(msg)
        return sorted(included, key=lambda module: (module.indexorder, module.name))


@dc.dataclass(slots=True)
class Course:
    """The root of a loaded course content tree."""

    title: str
    version: str = ""
    extrahead: str = ""
    courseinfo: list[CourseInfo] = dc.field(default_factory=list)
    maps: list[MapFragment] = dc.field(default_factory=list)
    forcemedia: list[str] = dc.field(default_factory=list)
    themes: dict[str, Theme] = dc.field(default_factory=dict)

    def ordered_themes(self) -> list[Theme]:
        """Return the included themes ordered by ``indexorder``.

        Raises
        ------
        MissingIndexOrderError
            If an included theme has no ``indexorder``.
        """
        included = [theme for theme in self.themes.values() if not theme.excluded]
        for theme in included:
            if theme.indexorder is None:
                msg = f"Theme '{theme.name}' has no indexorder set."
                raise MissingIndexOrderError(msg)
        return sorted(included, key=lambda theme: (theme.indexorder, theme.name))


__all__ = [
    "Course",
    "CourseInfo",
    "Location",
    "MapFragment",
    "Module",
    "Step",
    "Theme",
    "step_sort_key",
]
