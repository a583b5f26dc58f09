"""Load build configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from coursegen._constants import DEFAULT_MEDIA_DIR
from coursegen.errors import CourseConfigError

from .helpers import _build_tidy_config, _coerce_bool, _normalize_names, _optional_path
from .models import BuildConfig


def load_build_config(path: Path) -> BuildConfig:
    """Load the YAML configuration describing one course build.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML build configuration (for example,
        ``config/course.yaml``). Relative paths inside the file are resolved
        against the file's directory.

    Returns
    -------
    BuildConfig
        Parsed configuration with defaults applied.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    CourseConfigError
        If required fields are missing or have the wrong type.

    Examples
    --------
    >>> from pathlib import Path
    >>> from coursegen.config import load_build_config
    >>> config = load_build_config(Path("config/course.yaml"))  # doctest: +SKIP
    >>> config.media_dir  # doctest: +SKIP
    'media'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):  # pragma: no cover - config error guard
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    return build_config_from_mapping(raw, base=path.parent)


def build_config_from_mapping(
    raw: typ.Mapping[str, typ.Any], *, base: Path
) -> BuildConfig:
    """Build a :class:`BuildConfig` from an already-parsed mapping."""
    build_raw = raw.get("build") or {}
    if not isinstance(build_raw, dict):
        msg = "'build' must be a mapping."
        raise CourseConfigError(msg)

    source_dir = _optional_path(build_raw.get("source"), base=base)
    if source_dir is None:
        msg = "'build.source' is required."
        raise CourseConfigError(msg)
    output_dir = _optional_path(build_raw.get("output", "public"), base=base)
    if output_dir is None:
        msg = "'build.output' must not be empty."
        raise CourseConfigError(msg)

    media_dir = str(build_raw.get("media_dir") or DEFAULT_MEDIA_DIR).strip("/")
    return BuildConfig(
        source_dir=source_dir,
        output_dir=output_dir,
        media_dir=media_dir,
        templates_dir=_optional_path(build_raw.get("templates_dir"), base=base),
        framework_dir=_optional_path(build_raw.get("framework_dir"), base=base),
        filters=_normalize_names(build_raw.get("filters")),
        redefines_fatal=_coerce_bool(
            build_raw.get("redefines_fatal", True), field="build.redefines_fatal"
        ),
        tidy=_build_tidy_config(raw.get("tidy")),
    )


__all__ = ["build_config_from_mapping", "load_build_config"]
