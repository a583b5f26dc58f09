"""Track which media files the generated pages use and delete the rest.

Every written page is scanned for ``<media_dir>/<name>`` references. Popup
bodies are stored base64-encoded, so those are decoded and scanned too. Names
are compared case-insensitively; the first spelling seen is canonical.

Once every page has been scanned, :class:`MediaGarbageCollector` reconciles
the output media directory against the registry:

* files nobody references are deleted,
* files referenced with a different case are renamed to the canonical name,
* everything else is kept.

Running the collector twice with the same registry changes nothing the second
time.
"""

from __future__ import annotations

import base64
import binascii
import dataclasses as dc
import logging
import re
import typing as typ

from coursegen._constants import DEFAULT_MEDIA_DIR
from coursegen.errors import MediaCleanupError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from coursegen.diagnostics import BuildReport

logger = logging.getLogger(__name__)

POPUP_PATTERN = re.compile(r'<span class="twpopup-inner">(.*?)</span>', re.DOTALL)


class MediaRegistry:
    """The set of media names referenced by generated output."""

    def __init__(self, report: BuildReport, *, media_dir: str = DEFAULT_MEDIA_DIR) -> None:
        self.report = report
        self.media_dir = media_dir
        self._pattern = re.compile(rf"{re.escape(media_dir)}/(.*?)[\"']")
        self._used: dict[str, str] = {}

    def add(self, name: str, *, source: str = "") -> None:
        """Mark ``name`` as used."""
        name = name.strip()
        if not name:
            return
        key = name.lower()
        canonical = self._used.get(key)
        if canonical is None:
            self._used[key] = name
        elif canonical != name:
            where = f" in {source}" if source else ""
            self.report.warn(
                f"Media '{name}'{where} differs in case from '{canonical}'; "
                f"using '{canonical}'."
            )

    def add_all(self, names: cabc.Iterable[str], *, source: str = "") -> None:
        for name in names:
            self.add(name, source=source)

    def scan(self, html: str, *, source: str = "") -> None:
        """Record every media reference in ``html``, including popup bodies."""
        for match in self._pattern.finditer(html):
            self.add(match.group(1), source=source)
        for match in POPUP_PATTERN.finditer(html):
            encoded = "".join(match.group(1).split())
            try:
                decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError):
                logger.debug("skipping undecodable popup body in %s", source or "page")
                continue
            self.scan(decoded, source=source)

    def scan_file(self, path: Path) -> None:
        self.scan(path.read_text(encoding="utf-8"), source=str(path))

    def canonical(self, name: str) -> str | None:
        """Return the canonical spelling of ``name`` or None when unused."""
        return self._used.get(name.lower())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._used

    def __len__(self) -> int:
        return len(self._used)


@dc.dataclass(slots=True)
class MediaReport:
    """What one reconciliation pass did to the media directory."""

    kept: list[str] = dc.field(default_factory=list)
    removed: list[str] = dc.field(default_factory=list)
    renamed: list[tuple[str, str]] = dc.field(default_factory=list)


class MediaGarbageCollector:
    """Reconcile a media directory against a :class:`MediaRegistry`."""

    def reconcile(self, media_dir: Path, registry: MediaRegistry) -> MediaReport:
        """Delete unused files and fix case drift in ``media_dir``.

        Subdirectories are left alone. A file that disappears before it can be
        removed is logged and skipped.

        Raises
        ------
        MediaCleanupError
            If a file cannot be deleted or renamed.
        """
        report = MediaReport()
        if not media_dir.is_dir():
            logger.debug("media directory %s does not exist; nothing to reconcile", media_dir)
            return report

        entries = sorted(path for path in media_dir.iterdir() if not path.is_dir())
        present = {path.name for path in entries}
        for path in entries:
            canonical = registry.canonical(path.name)
            if canonical is None or (canonical != path.name and canonical in present):
                self._remove(path)
                report.removed.append(path.name)
            elif canonical != path.name:
                self._rename(path, path.with_name(canonical))
                present.discard(path.name)
                present.add(canonical)
                report.renamed.append((path.name, canonical))
            else:
                report.kept.append(path.name)
        logger.info(
            "media reconciled: %d kept, %d removed, %d renamed",
            len(report.kept),
            len(report.removed),
            len(report.renamed),
        )
        return report

    def _remove(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info("media file %s vanished before removal", path)
        except OSError as exc:
            msg = f"Unable to remove unused media '{path}': {exc}"
            raise MediaCleanupError(msg) from exc

    def _rename(self, path: Path, target: Path) -> None:
        try:
            path.rename(target)
        except OSError as exc:
            msg = f"Unable to rename media '{path}' to '{target.name}': {exc}"
            raise MediaCleanupError(msg) from exc


__all__ = ["MediaGarbageCollector", "MediaRegistry", "MediaReport"]
