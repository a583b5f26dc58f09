"""Collect non-fatal build diagnostics and the files a build produced."""

from __future__ import annotations

import dataclasses as dc
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True)
class BuildReport:
    """Warnings, notices and written paths accumulated over one build.

    Attributes
    ----------
    warnings : list[str]
        Recoverable problems such as unresolved anchors or malformed media
        tags. Each has also been rendered inline in the affected page.
    notices : list[str]
        Informational messages, for example about excluded content.
    written : list[Path]
        Every file the build wrote, in write order.
    formatter_output : list[str]
        Diagnostics captured from the external HTML formatter.
    """

    warnings: list[str] = dc.field(default_factory=list)
    notices: list[str] = dc.field(default_factory=list)
    written: list[Path] = dc.field(default_factory=list)
    formatter_output: list[str] = dc.field(default_factory=list)

    def warn(self, message: str) -> None:
        """Record and log a recoverable problem."""
        self.warnings.append(message)
        logger.warning(message)

    def notice(self, message: str) -> None:
        """Record and log an informational message."""
        self.notices.append(message)
        logger.info(message)

    def wrote(self, path: Path) -> Path:
        """Record ``path`` as produced by the build and return it."""
        self.written.append(path)
        logger.debug("wrote %s", path)
        return path

    @property
    def ok(self) -> bool:
        """Return True when the build produced no warnings."""
        return not self.warnings


__all__ = ["BuildReport"]
