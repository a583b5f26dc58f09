"""Build dropdown menus and previous/next links from the numbered course tree.

Dropdown entries are tagged with a :class:`Relation` so templates render the
current item (and module prerequisites or follow-ons) directly; no markup is
patched after rendering. Module relationships are read from the rendered
module's own ``prerequisites`` and ``leadsto`` lists only.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import logging
import typing as typ

from coursegen._constants import OUTJECTIVES_MENU_TITLE, OUTJECTIVES_PAGE
from coursegen.errors import EmptyModuleError

if typ.TYPE_CHECKING:
    from coursegen.tree.models import Course, Module, Step, Theme

logger = logging.getLogger(__name__)


class Relation(enum.StrEnum):
    """How a dropdown entry relates to the page showing the dropdown."""

    PLAIN = "plain"
    CURRENT = "current"
    PREREQUISITE = "prerequisite"
    LEADSTO = "leadsto"


@dc.dataclass(frozen=True, slots=True)
class DropdownEntry:
    """One option in a navigation dropdown.

    ``level`` carries a module's difficulty and is empty for other entries.
    """

    id: str
    title: str
    href: str
    relation: Relation = Relation.PLAIN
    level: str = ""

    @property
    def current(self) -> bool:
        return self.relation is Relation.CURRENT


@dc.dataclass(frozen=True, slots=True)
class StepNavigation:
    """Previous, next, first and last links for one step page.

    ``previous`` and ``next`` are ``None`` on the first and last steps, which
    templates render as disabled buttons.
    """

    output_id: int
    maxstep: int
    first: str
    last: str
    previous: str | None = None
    next: str | None = None


class NavigationFragments:
    """Dropdown and step navigation data for every included page."""

    def __init__(
        self,
        themes: list[Theme],
        modules: dict[str, list[Module]],
        steps: dict[tuple[str, str], list[Step]],
    ) -> None:
        self.themes = themes
        self.modules = modules
        self.steps = steps
        self._by_name = {theme.name: theme for theme in themes}

    def theme_dropdown(self, current: str | None, *, view: str = "theme") -> list[DropdownEntry]:
        """Return the theme menu as seen from a theme page or a step page."""
        prefix = "../../" if view == "step" else "../"
        return [
            DropdownEntry(
                id=theme.name,
                title=theme.title,
                href=f"{prefix}{theme.name}/index.html",
                relation=Relation.CURRENT if theme.name == current else Relation.PLAIN,
            )
            for theme in self.themes
        ]

    def module_dropdown(self, theme: str, module: Module) -> list[DropdownEntry]:
        """Return the sibling module menu for a step in ``module``.

        When the theme has an outcomes and objectives page it is listed first.
        """
        entries: list[DropdownEntry] = []
        if self._by_name[theme].has_outjectives:
            entries.append(
                DropdownEntry(
                    id="outjectives",
                    title=OUTJECTIVES_MENU_TITLE,
                    href=f"../{OUTJECTIVES_PAGE}",
                )
            )
        for sibling in self.modules[theme]:
            if sibling.name == module.name:
                relation = Relation.CURRENT
            elif sibling.name in module.prerequisites:
                relation = Relation.PREREQUISITE
            elif sibling.name in module.leadsto:
                relation = Relation.LEADSTO
            else:
                relation = Relation.PLAIN
            entries.append(
                DropdownEntry(
                    id=sibling.name,
                    title=sibling.title,
                    href=f"../{sibling.name}/{sibling.step_filename(1)}",
                    relation=relation,
                    level=sibling.level,
                )
            )
        return entries

    def step_dropdown(
        self, theme: str, module: Module, output_id: int
    ) -> list[DropdownEntry]:
        """Return the step menu for ``module`` with ``output_id`` marked current."""
        return [
            DropdownEntry(
                id=str(step.output_id),
                title=step.title,
                href=module.step_filename(step.output_id or 0),
                relation=Relation.CURRENT if step.output_id == output_id else Relation.PLAIN,
            )
            for step in self.steps[(theme, module.name)]
        ]

    def step_navigation(self, theme: str, module: Module, output_id: int) -> StepNavigation:
        """Return previous/next links for step ``output_id`` of ``module``."""
        maxstep = len(self.steps[(theme, module.name)])
        return StepNavigation(
            output_id=output_id,
            maxstep=maxstep,
            first=module.step_filename(1),
            last=module.step_filename(maxstep),
            previous=module.step_filename(output_id - 1) if output_id > 1 else None,
            next=module.step_filename(output_id + 1) if output_id < maxstep else None,
        )

    def maxstep(self, theme: str, module: str) -> int:
        return len(self.steps[(theme, module)])


class NavigationBuilder:
    """Derive navigation data from a course whose steps have been numbered."""

    def build(self, course: Course) -> NavigationFragments:
        """Collect ordered themes, modules and steps.

        Raises
        ------
        MissingIndexOrderError
            If an included theme or module has no ``indexorder``.
        EmptyModuleError
            If an included module has no included steps.
        """
        themes = course.ordered_themes()
        modules: dict[str, list[Module]] = {}
        steps: dict[tuple[str, str], list[Step]] = {}
        for theme in themes:
            modules[theme.name] = theme.ordered_modules()
            for module in modules[theme.name]:
                included = module.included_steps()
                if not included:
                    msg = (
                        f"No steps stored for module '{module.name}' "
                        f"in theme '{theme.name}'."
                    )
                    raise EmptyModuleError(msg)
                steps[(theme.name, module.name)] = included
        logger.debug(
            "navigation built for %d themes and %d modules", len(themes), len(steps)
        )
        return NavigationFragments(themes, modules, steps)


__all__ = [
    "DropdownEntry",
    "NavigationBuilder",
    "NavigationFragments",
    "Relation",
    "StepNavigation",
]
