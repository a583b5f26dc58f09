"""First pass over the course tree: number steps and collect symbol tables.

:class:`SymbolTableBuilder` walks every theme, module and step exactly once,
before any page is resolved. It

* propagates exclusion from themes to modules to steps,
* assigns each included step a contiguous ``output_id`` within its module in
  numeric filename order,
* records ``[target]`` anchors, ``[glossary]`` definitions and references,
  and ``[ref]`` citations.

Anchors and references are recorded only for included steps. A glossary
definition is recorded even when its step is excluded, so a term used by an
included step can still be defined elsewhere; only included steps appear in
the term's back-links.

A paired glossary tag with an empty body records a use, not a definition.
Themes and modules are walked in ``indexorder`` so redefinition errors name
the earlier location in course order.

The resulting :class:`SymbolTables` are frozen before the second pass starts.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ
from urllib.parse import quote

from coursegen._constants import (
    AUTO_ANCHOR_PREFIX,
    GLOSSARY_DIGIT_BUCKET,
    GLOSSARY_SYMBOL_BUCKET,
    MIN_STEP_WIDTH,
)
from coursegen.errors import AnchorRedefinitionError, GlossaryRedefinitionError
from coursegen.tree.models import Location

from .references import ReferenceTable
from .tags import Tag, iter_tags, tokenize

if typ.TYPE_CHECKING:
    from coursegen.diagnostics import BuildReport
    from coursegen.tree.models import Course, Module, Step, Theme

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

_Ordered = typ.TypeVar("_Ordered", "Theme", "Module")


def glossary_key(term: str) -> str:
    """Normalize a glossary term into its lookup key.

    Examples
    --------
    >>> glossary_key("Access Point")
    'access_point'
    >>> glossary_key("C++")
    'c%2B%2B'
    """
    return quote(_WHITESPACE.sub("_", term.strip().lower()), safe="")


def glossary_bucket(term: str) -> str:
    """Return the glossary page a term is listed on.

    Terms starting with ``a``-``z`` use that letter, digits share ``digit``
    and anything else falls into ``symb``.
    """
    first = term.strip()[:1].lower()
    if "a" <= first <= "z":
        return first
    if first.isdigit():
        return GLOSSARY_DIGIT_BUCKET
    return GLOSSARY_SYMBOL_BUCKET


def auto_anchor_name(theme_title: str) -> str:
    """Return the automatic anchor name for a theme title."""
    return AUTO_ANCHOR_PREFIX + theme_title.replace(" ", "_")


def _course_order(nodes: dict[str, _Ordered]) -> list[_Ordered]:
    """Return themes or modules in ``indexorder``, unordered ones last by name."""
    return sorted(
        nodes.values(),
        key=lambda node: (node.indexorder is None, node.indexorder or 0, node.name),
    )


@dc.dataclass(frozen=True, slots=True)
class AnchorTarget:
    """Where an anchor points.

    ``module`` and ``output_id`` are ``None`` for theme anchors, which link to
    the theme's map page.
    """

    name: str
    theme: str
    module: str | None = None
    output_id: int | None = None
    location: Location | None = None

    def describe(self) -> str:
        if self.location is not None:
            return f"{self.location} (step {self.output_id})"
        return f"theme '{self.theme}'"


class AnchorTable:
    """Anchor names defined across the whole course."""

    def __init__(self) -> None:
        self._targets: dict[str, AnchorTarget] = {}
        self._frozen = False

    def define(self, target: AnchorTarget) -> None:
        """Add ``target``; a name may only be defined once.

        Raises
        ------
        AnchorRedefinitionError
            If the name already points somewhere.
        """
        if self._frozen:
            msg = "Anchor table is frozen; anchors cannot be added."
            raise RuntimeError(msg)
        existing = self._targets.get(target.name)
        if existing is not None:
            msg = (
                f"Redefinition of anchor '{target.name}' in {target.describe()}, "
                f"previously defined in {existing.describe()}."
            )
            raise AnchorRedefinitionError(msg)
        self._targets[target.name] = target

    def lookup(self, name: str) -> AnchorTarget | None:
        return self._targets.get(name)

    def freeze(self) -> None:
        self._frozen = True

    def __contains__(self, name: object) -> bool:
        return name in self._targets

    def __len__(self) -> int:
        return len(self._targets)


@dc.dataclass(slots=True)
class GlossaryEntry:
    """A glossary term, its definition and the steps that use it."""

    key: str
    term: str
    definition: str | None = None
    defined_at: Location | None = None
    references: list[Location] = dc.field(default_factory=list)

    @property
    def bucket(self) -> str:
        return glossary_bucket(self.term)

    @property
    def visible(self) -> bool:
        """Return True when at least one included step uses the term."""
        return bool(self.references)


class GlossaryTable:
    """Glossary terms keyed by normalized key."""

    def __init__(self, *, redefines_fatal: bool = True) -> None:
        self.redefines_fatal = redefines_fatal
        self._entries: dict[str, GlossaryEntry] = {}
        self._frozen = False

    def _entry(self, term: str) -> GlossaryEntry:
        if self._frozen:
            msg = "Glossary table is frozen; terms cannot be recorded."
            raise RuntimeError(msg)
        key = glossary_key(term)
        entry = self._entries.get(key)
        if entry is None:
            entry = GlossaryEntry(key=key, term=term.strip())
            self._entries[key] = entry
        return entry

    def define(
        self,
        term: str,
        definition: str,
        location: Location,
        report: BuildReport,
        *,
        included: bool = True,
    ) -> None:
        """Record a definition body for ``term`` seen at ``location``.

        The first definition wins. A later one aborts the build when
        ``redefines_fatal`` is set and is otherwise reported and ignored.
        """
        entry = self._entry(term)
        if entry.definition is not None:
            msg = (
                f"Redefinition of glossary term '{term}' in {location}, "
                f"originally defined in {entry.defined_at}."
            )
            if self.redefines_fatal:
                raise GlossaryRedefinitionError(msg)
            report.warn(msg)
        else:
            entry.definition = definition
            entry.defined_at = location
        if included:
            entry.references.append(location)

    def reference(self, term: str, location: Location, *, included: bool = True) -> None:
        """Record a use of ``term`` at ``location``."""
        entry = self._entry(term)
        if included:
            entry.references.append(location)

    def lookup(self, term: str) -> GlossaryEntry | None:
        return self._entries.get(glossary_key(term))

    def visible_entries(self) -> list[GlossaryEntry]:
        """Return the terms used by included steps, ordered by key."""
        return [
            self._entries[key] for key in sorted(self._entries) if self._entries[key].visible
        ]

    def freeze(self) -> None:
        self._frozen = True

    def __len__(self) -> int:
        return len(self._entries)


@dc.dataclass(slots=True)
class SymbolTables:
    """Everything the first pass learned about the course."""

    anchors: AnchorTable
    glossary: GlossaryTable
    references: ReferenceTable
    step_count: int = 0

    def freeze(self) -> None:
        self.anchors.freeze()
        self.glossary.freeze()
        self.references.freeze()


class SymbolTableBuilder:
    """Walk the course once and populate the symbol tables."""

    def __init__(self, report: BuildReport, *, redefines_fatal: bool = True) -> None:
        self.report = report
        self.redefines_fatal = redefines_fatal

    def build(self, course: Course) -> SymbolTables:
        """Number the course's steps and collect its symbols.

        Parameters
        ----------
        course : Course
            Loaded course tree. ``excluded`` flags, ``output_id`` and
            ``step_width`` are updated in place.

        Returns
        -------
        SymbolTables
            Frozen anchor, glossary and reference tables plus the number of
            included steps.

        Raises
        ------
        AnchorRedefinitionError
            If two included steps define the same anchor.
        GlossaryRedefinitionError
            If a term is defined twice and redefinitions are fatal.
        """
        tables = SymbolTables(
            anchors=AnchorTable(),
            glossary=GlossaryTable(redefines_fatal=self.redefines_fatal),
            references=ReferenceTable(),
        )
        for theme in _course_order(course.themes):
            if theme.excluded:
                self.report.notice(f"Theme '{theme.name}' is excluded by filters.")
            else:
                tables.anchors.define(
                    AnchorTarget(name=auto_anchor_name(theme.title), theme=theme.name)
                )
            for module in _course_order(theme.modules):
                module.excluded = module.excluded or theme.excluded
                tables.step_count += self._scan_module(theme, module, tables)
        tables.freeze()
        logger.debug(
            "first pass complete: %d steps, %d anchors, %d glossary terms",
            tables.step_count,
            len(tables.anchors),
            len(tables.glossary),
        )
        return tables

    def _scan_module(self, theme: Theme, module: Module, tables: SymbolTables) -> int:
        if module.excluded and not theme.excluded:
            self.report.notice(
                f"Module '{module.name}' in theme '{theme.name}' is excluded by filters."
            )
        output_id = 0
        for step in module.ordered_steps():
            step.excluded = step.excluded or module.excluded
            if step.excluded:
                step.output_id = None
            else:
                output_id += 1
                step.output_id = output_id
            self._scan_step(theme, module, step, tables)
        module.step_width = max(MIN_STEP_WIDTH, len(str(output_id)))
        return output_id

    def _scan_step(
        self, theme: Theme, module: Module, step: Step, tables: SymbolTables
    ) -> None:
        location = Location(
            theme=theme.name,
            module=module.name,
            source=step.filename,
            output_id=step.output_id,
            title=step.title,
        )
        included = not step.excluded
        for tag in iter_tags(tokenize(step.body)):
            self._record(tag, location, tables, included=included)

    def _record(
        self, tag: Tag, location: Location, tables: SymbolTables, *, included: bool
    ) -> None:
        match tag.name:
            case "target":
                name = tag.attrs.get("name")
                if name and included:
                    tables.anchors.define(
                        AnchorTarget(
                            name=name,
                            theme=location.theme,
                            module=location.module,
                            output_id=location.output_id,
                            location=location,
                        )
                    )
            case "glossary":
                term = tag.attrs.get("term")
                if not term:
                    return
                definition = (tag.body_source or "").strip()
                if tag.paired and definition:
                    tables.glossary.define(
                        term,
                        definition,
                        location,
                        self.report,
                        included=included,
                    )
                else:
                    tables.glossary.reference(term, location, included=included)
            case "ref":
                tables.references.record(
                    tag.attrs, location, self.report, included=included
                )
            case _:
                pass


__all__ = [
    "AnchorTable",
    "AnchorTarget",
    "GlossaryEntry",
    "GlossaryTable",
    "SymbolTableBuilder",
    "SymbolTables",
    "auto_anchor_name",
    "glossary_bucket",
    "glossary_key",
]
