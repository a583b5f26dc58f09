"""Unit tests for media tracking and media directory reconciliation."""

from __future__ import annotations

import base64
import typing as typ

from coursegen.diagnostics import BuildReport
from coursegen.generator import MediaGarbageCollector, MediaRegistry

if typ.TYPE_CHECKING:
    from pathlib import Path


def _media_dir(tmp_path: Path, *names: str) -> Path:
    media = tmp_path / "media"
    media.mkdir()
    for name in names:
        (media / name).write_text(name, encoding="utf-8")
    return media


def test_scan_finds_plain_and_popup_references() -> None:
    """References inside base64 popup bodies should be found."""
    registry = MediaRegistry(BuildReport())
    hidden = base64.b64encode(b'<img src="../../media/hidden.png" />').decode("ascii")
    registry.scan(
        '<img src="../../media/shown.png" />'
        f'<span class="twpopup-inner">{hidden}</span>'
    )
    assert "shown.png" in registry
    assert "hidden.png" in registry
    assert len(registry) == 2


def test_case_conflict_keeps_first_spelling() -> None:
    """A second spelling of the same name should warn and keep the first."""
    report = BuildReport()
    registry = MediaRegistry(report)
    registry.add("Logo.PNG")
    registry.add("logo.png", source="step01.html")
    assert registry.canonical("LOGO.png") == "Logo.PNG"
    assert len(report.warnings) == 1
    assert "step01.html" in report.warnings[0]


def test_reconcile_removes_and_renames(tmp_path: Path) -> None:
    """Unused files go; wrong-case files are renamed to the canonical name."""
    media = _media_dir(tmp_path, "keep.png", "UNUSED.gif", "diagram.PNG")
    (media / "sub").mkdir()
    registry = MediaRegistry(BuildReport())
    registry.add_all(["keep.png", "diagram.png"])
    result = MediaGarbageCollector().reconcile(media, registry)
    assert sorted(path.name for path in media.iterdir()) == ["diagram.png", "keep.png", "sub"]
    assert result.removed == ["UNUSED.gif"]
    assert result.renamed == [("diagram.PNG", "diagram.png")]


def test_reconcile_is_idempotent(tmp_path: Path) -> None:
    """A second pass with the same registry should change nothing."""
    media = _media_dir(tmp_path, "a.png", "B.png", "c.png")
    registry = MediaRegistry(BuildReport())
    registry.add_all(["a.png", "b.png"])
    collector = MediaGarbageCollector()
    collector.reconcile(media, registry)
    before = sorted(path.name for path in media.iterdir())
    second = collector.reconcile(media, registry)
    assert sorted(path.name for path in media.iterdir()) == before
    assert not second.removed and not second.renamed


def test_reconcile_drops_duplicate_case_variant(tmp_path: Path) -> None:
    """When the canonical name already exists the variant is deleted."""
    media = _media_dir(tmp_path, "pic.png", "PIC.png")
    registry = MediaRegistry(BuildReport())
    registry.add("pic.png")
    MediaGarbageCollector().reconcile(media, registry)
    assert [path.name for path in media.iterdir()] == ["pic.png"]


def test_missing_media_directory_is_fine(tmp_path: Path) -> None:
    """Reconciling a directory that does not exist should do nothing."""
    result = MediaGarbageCollector().reconcile(tmp_path / "absent", MediaRegistry(BuildReport()))
    assert not (result.kept or result.removed or result.renamed)
