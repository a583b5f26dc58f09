"""Bibliographic citations: the ``[ref]`` tag and the course references page.

A ``[ref]`` tag carrying a ``type`` defines a citation; one without a type
cites it::

    [ref id="knuth97" type="book" author="Knuth, Donald" booktitle="TAOCP"
         publisher="Addison-Wesley" location="Reading, MA" date="1997"]
    [ref id="knuth97"]

Entries are formatted in IEEE style on ``references.html`` with numbered
back-links to every citing step. Citations in step text render as
``[<a href="../../references.html#knuth97">knuth97</a>]`` and runs of adjacent
citations compress to a single bracket.
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ
from html import escape

from coursegen._constants import REFERENCES_PAGE

if typ.TYPE_CHECKING:
    from coursegen.diagnostics import BuildReport
    from coursegen.tree.models import Location

REFERENCE_TYPES = frozenset({"book", "book article", "periodical"})

_CITATION_GAP = re.compile(r"</a>\]\s+\[<a href=")
_CITATION_RUN = re.compile(
    r'(<a href="[^"]*references\.html#[^"]*">[^<]*</a>)\]\[(?=<a href="[^"]*references\.html#)'
)
_INITIALS = re.compile(r"^\w\.(\s*\w\.)*$")
_FORENAME = re.compile(r"\b(\w)\w*")


@dc.dataclass(slots=True)
class ReferenceEntry:
    """One citation id, its definition and everywhere it is cited."""

    ref_id: str
    definition: dict[str, str] | None = None
    defined_at: Location | None = None
    citations: list[Location] = dc.field(default_factory=list)


class ReferenceTable:
    """Citation definitions and back-references collected in the first pass."""

    def __init__(self) -> None:
        self._entries: dict[str, ReferenceEntry] = {}
        self._frozen = False

    def record(
        self,
        attrs: typ.Mapping[str, str],
        location: Location,
        report: BuildReport,
        *,
        included: bool = True,
    ) -> None:
        """Record a ``[ref]`` occurrence at ``location``."""
        self._check_mutable()
        ref_id = attrs.get("id", "").strip()
        if not ref_id:
            report.warn(f"Reference in {location} has no id.")
            return
        entry = self._entries.setdefault(ref_id, ReferenceEntry(ref_id=ref_id))
        ref_type = attrs.get("type")
        if ref_type:
            if ref_type.lower() not in REFERENCE_TYPES:
                report.warn(f"Unsupported reference type '{ref_type}' in {location}.")
                return
            if entry.definition is not None:
                report.warn(
                    f"Redefinition of reference '{ref_id}' in {location}, "
                    f"last set in {entry.defined_at}."
                )
            entry.definition = {key: value for key, value in attrs.items()}
            entry.definition["type"] = ref_type.lower()
            entry.defined_at = location
        if included:
            entry.citations.append(location)

    def freeze(self) -> None:
        self._frozen = True

    def lookup(self, ref_id: str) -> ReferenceEntry | None:
        return self._entries.get(ref_id)

    def cited(self) -> list[ReferenceEntry]:
        """Return the entries cited from at least one included step, by id."""
        return [
            self._entries[key]
            for key in sorted(self._entries, key=str.lower)
            if self._entries[key].citations
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def _check_mutable(self) -> None:
        if self._frozen:
            msg = "Reference table is frozen; citations cannot be recorded."
            raise RuntimeError(msg)


def convert_citation(ref_id: str, prefix: str) -> str:
    """Return the inline markup citing ``ref_id`` from a page at ``prefix``."""
    safe_id = escape(ref_id, quote=True)
    return f'[<a href="{prefix}{REFERENCES_PAGE}#{safe_id}">{safe_id}</a>]'


def compress_citations(html: str) -> str:
    """Merge adjacent citation brackets, so ``[a][b]`` becomes ``[a, b]``."""
    html = _CITATION_GAP.sub("</a>][<a href=", html)
    previous = None
    while previous != html:
        previous = html
        html = _CITATION_RUN.sub(r"\1, ", html)
    return html


def _convert_name(surname: str, initials: str, suffix: str | None) -> str:
    if not _INITIALS.match(initials):
        initials = ". ".join(_FORENAME.findall(initials)) + "."
    result = f"{initials.replace(' ', '')} {surname}"
    if suffix:
        result = f"{result}, {suffix}"
    return result


def format_names(name: str, others: str | None = None) -> str:
    """Convert ``"Surname, Forenames"`` lists into IEEE name order.

    Parameters
    ----------
    name : str
        The first name as ``surname, initials-or-forenames[, suffix.]``.
    others : str, optional
        Further names in the same comma separated format.

    Examples
    --------
    >>> format_names("Knuth, Donald Ervin")
    'D.E. Knuth'
    >>> format_names("Kernighan, B.", "Ritchie, Dennis")
    'B. Kernighan and D. Ritchie'
    """
    combined = f"{name}, {others}" if others else name
    parts = [part.strip() for part in combined.split(",")]
    results: list[str] = []
    index = 0
    while index < len(parts):
        surname = parts[index]
        initials = parts[index + 1] if index + 1 < len(parts) else ""
        suffix = None
        if index + 2 < len(parts) and parts[index + 2].endswith("."):
            suffix = parts[index + 2]
            index += 1
        results.append(_convert_name(surname, initials, suffix))
        index += 2
    if len(results) == 1:
        return results[0]
    return ", ".join(results[:-1]) + " and " + results[-1]


def describe_entry(entry: ReferenceEntry) -> dict[str, typ.Any]:
    """Build the template context for one references page entry."""
    data = entry.definition or {}
    authors = ""
    if data.get("author"):
        authors = format_names(data["author"], data.get("authors")) + ", "

    editors = ""
    if data.get("editor"):
        editors = format_names(data["editor"], data.get("coeditors"))
        editors += ", Eds." if data.get("coeditors") else ", Ed."
    translators = ""
    if data.get("translator"):
        translators = format_names(data["translator"], data.get("cotranslators"))
        translators += " Trans."
    edtrans = ", ".join(part for part in (editors, translators) if part)

    booktitle = data.get("booktitle", "")
    if data.get("edition"):
        booktitle = f"{booktitle}, {data['edition']}"

    return {
        "id": entry.ref_id,
        "type": data.get("type"),
        "authors": authors,
        "booktitle": booktitle,
        "articletitle": data.get("articletitle", ""),
        "journalname": data.get("journalname", ""),
        "volume": data.get("volume", ""),
        "issue": data.get("issue", ""),
        "pages": data.get("pages", ""),
        "edtrans": edtrans,
        "location": data.get("location") or "n.p.",
        "publisher": data.get("publisher") or "n.p.",
        "date": data.get("date") or "n.d.",
    }


__all__ = [
    "REFERENCE_TYPES",
    "ReferenceEntry",
    "ReferenceTable",
    "compress_citations",
    "convert_citation",
    "describe_entry",
    "format_names",
]
