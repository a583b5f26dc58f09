"""Write the glossary: one page per initial letter plus an index page.

Only terms used by at least one included step are listed; a term defined in
an excluded step and never used elsewhere is left out silently. Terms are
grouped into buckets ``a`` to ``z``, ``digit`` and ``symb``, and every page
carries an index bar in the order ``@``, ``0-9``, ``A`` ... ``Z``. Buckets with
no terms get no page and appear disabled in the index bar.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from coursegen._constants import GLOSSARY_BUCKET_LABELS, GLOSSARY_BUCKETS, GLOSSARY_DIR

if typ.TYPE_CHECKING:
    from pathlib import Path

    from coursegen.diagnostics import BuildReport

    from .context import PageWriter, SiteContext
    from .resolver import ReferenceResolver
    from .symbols import GlossaryEntry, GlossaryTable

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class IndexBarEntry:
    """One bucket in the glossary index bar."""

    bucket: str
    label: str
    href: str | None
    active: bool = False

    @property
    def state(self) -> str:
        if self.active:
            return "active"
        return "indexed" if self.href else "notindexed"


@dc.dataclass(frozen=True, slots=True)
class BackLink:
    number: int
    href: str
    title: str


def bucket_title(bucket: str) -> str:
    """Return the heading for a bucket page."""
    match bucket:
        case "digit":
            return "Glossary of terms starting with digits"
        case "symb":
            return "Glossary of terms starting with other characters"
        case _:
            return f"Glossary of terms starting with '{bucket.upper()}'"


class GlossaryPageEmitter:
    """Render glossary bucket pages and the glossary index."""

    def __init__(
        self,
        output_dir: Path,
        writer: PageWriter,
        resolver: ReferenceResolver,
        site: SiteContext,
        report: BuildReport,
    ) -> None:
        self.output_dir = output_dir / GLOSSARY_DIR
        self.writer = writer
        self.resolver = resolver
        self.site = site
        self.report = report

    def buckets(self, glossary: GlossaryTable) -> dict[str, list[GlossaryEntry]]:
        """Group the visible terms by bucket, each bucket sorted by key."""
        grouped: dict[str, list[GlossaryEntry]] = {bucket: [] for bucket in GLOSSARY_BUCKETS}
        for entry in glossary.visible_entries():
            grouped[entry.bucket].append(entry)
        return grouped

    def emit(self, glossary: GlossaryTable) -> list[Path]:
        """Write every glossary page.

        Returns
        -------
        list[Path]
            Written pages, bucket pages first and ``index.html`` last. Empty
            when no included step uses a glossary term.
        """
        grouped = self.buckets(glossary)
        if not any(grouped.values()):
            self.report.notice("No glossary terms to write.")
            return []

        written: list[Path] = []
        for bucket, entries in grouped.items():
            if not entries:
                continue
            context = self.site.base(
                "glossary",
                title=bucket_title(bucket),
                bucket=bucket,
                index_bar=self.index_bar(grouped, active=bucket),
                entries=[self._describe(entry) for entry in entries],
            )
            path = self.output_dir / f"{bucket}.html"
            written.append(self.writer.write("glossary_page.jinja", path, **context))

        index_context = self.site.base(
            "glossary",
            title="Glossary",
            index_bar=self.index_bar(grouped, active=None),
            term_count=sum(len(entries) for entries in grouped.values()),
        )
        written.append(
            self.writer.write(
                "glossary_index.jinja", self.output_dir / "index.html", **index_context
            )
        )
        logger.debug("wrote %d glossary pages", len(written))
        return written

    def index_bar(
        self, grouped: dict[str, list[GlossaryEntry]], *, active: str | None
    ) -> list[IndexBarEntry]:
        return [
            IndexBarEntry(
                bucket=bucket,
                label=GLOSSARY_BUCKET_LABELS.get(bucket, bucket.upper()),
                href=f"{bucket}.html" if grouped[bucket] else None,
                active=bucket == active,
            )
            for bucket in GLOSSARY_BUCKETS
        ]

    def _describe(self, entry: GlossaryEntry) -> dict[str, typ.Any]:
        if entry.definition is None:
            self.report.warn(f"Glossary term '{entry.term}' is used but never defined.")
            definition = ""
        else:
            definition = self.resolver.resolve(entry.definition, level="glossary")
        backlinks: list[BackLink] = []
        for number, location in enumerate(entry.references, start=1):
            module = self.site.course.themes[location.theme].modules[location.module]
            step_file = module.step_filename(location.output_id or 0)
            backlinks.append(
                BackLink(
                    number=number,
                    href=f"../{location.theme}/{location.module}/{step_file}",
                    title=location.title,
                )
            )
        return {
            "key": entry.key,
            "term": entry.term,
            "definition": definition,
            "backlinks": backlinks,
        }


__all__ = ["BackLink", "GlossaryPageEmitter", "IndexBarEntry", "bucket_title"]
