"""Typed dataclasses describing coursegen build configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from coursegen._constants import DEFAULT_MEDIA_DIR, DEFAULT_TIDY_ARGS, DEFAULT_TIDY_COMMAND


@dc.dataclass(slots=True)
class TidyConfig:
    """Settings for the external HTML formatter run over each written page."""

    enabled: bool = False
    command: str = DEFAULT_TIDY_COMMAND
    args: list[str] = dc.field(default_factory=lambda: list(DEFAULT_TIDY_ARGS))
    backup: bool = False


@dc.dataclass(slots=True)
class BuildConfig:
    """Everything one course build needs to know about its inputs and outputs.

    Attributes
    ----------
    source_dir : Path
        Root of the course content tree (``metadata.yaml`` plus one directory
        per theme).
    output_dir : Path
        Directory the course package is written into.
    media_dir : str
        Name of the media directory, relative to both source and output roots.
    templates_dir : Path or None
        Jinja template directory; ``None`` selects the packaged templates.
    framework_dir : Path or None
        Optional directory of static files merged into the output.
    filters : list[str]
        Names of the active content filters.
    redefines_fatal : bool
        Whether a second glossary definition aborts the build.
    tidy : TidyConfig
        External formatter settings.
    """

    source_dir: Path
    output_dir: Path
    media_dir: str = DEFAULT_MEDIA_DIR
    templates_dir: Path | None = None
    framework_dir: Path | None = None
    filters: list[str] = dc.field(default_factory=list)
    redefines_fatal: bool = True
    tidy: TidyConfig = dc.field(default_factory=TidyConfig)

    @property
    def source_media(self) -> Path:
        """Return the media directory inside the content tree."""
        return self.source_dir / self.media_dir

    @property
    def output_media(self) -> Path:
        """Return the media directory inside the generated package."""
        return self.output_dir / self.media_dir


__all__ = ["BuildConfig", "TidyConfig"]
