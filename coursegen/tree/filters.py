"""Decide whether a course resource survives the active content filters.

Resources carry optional ``include`` and ``exclude`` filter lists. Given the
filter names selected for a build:

* a resource with no filter lists is always included;
* any matching ``exclude`` name removes the resource;
* a resource with an ``include`` list needs at least one matching name, so it
  is removed when no filters are active at all.

Names compare case-insensitively.

Examples
--------
>>> from coursegen.tree.filters import ResourceFilter, ResourceFilters
>>> active = ResourceFilter(["Staff"])
>>> active.includes(ResourceFilters(include=["staff"]))
True
>>> ResourceFilter([]).includes(ResourceFilters(include=["staff"]))
False
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ


@dc.dataclass(slots=True)
class ResourceFilters:
    """Include and exclude filter names attached to one resource."""

    include: list[str] = dc.field(default_factory=list)
    exclude: list[str] = dc.field(default_factory=list)

    @classmethod
    def from_mapping(cls, raw: typ.Mapping[str, typ.Any] | None) -> ResourceFilters:
        """Build filters from a metadata ``filters`` mapping.

        Values may be lists or comma separated strings.
        """
        if not raw:
            return cls()
        return cls(
            include=_split_names(raw.get("include")),
            exclude=_split_names(raw.get("exclude")),
        )

    def __bool__(self) -> bool:
        return bool(self.include or self.exclude)


class ResourceFilter:
    """The set of filter names selected for a build."""

    def __init__(self, names: cabc.Iterable[str] = ()) -> None:
        self.names = frozenset(name.strip().lower() for name in names if name.strip())

    def includes(self, filters: ResourceFilters | None) -> bool:
        """Return True when a resource with ``filters`` belongs in the build."""
        if not filters:
            return True
        if not self.names and not filters.include:
            return True
        if any(name.lower() in self.names for name in filters.exclude):
            return False
        if not filters.include:
            return True
        return any(name.lower() in self.names for name in filters.include)

    def excludes(self, filters: ResourceFilters | None) -> bool:
        """Return True when a resource with ``filters`` is left out of the build."""
        return not self.includes(filters)


def _split_names(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        parts: list[object] = list(value.split(","))
    elif isinstance(value, list):
        parts = []
        for item in value:
            parts.extend(str(item).split(","))
    else:
        return []
    return [text for text in (str(part).strip() for part in parts) if text]


__all__ = ["ResourceFilter", "ResourceFilters"]
