"""Utility helpers shared by the coursegen configuration loader."""

from __future__ import annotations

import shlex
import typing as typ
from pathlib import Path

from coursegen._constants import DEFAULT_TIDY_ARGS, DEFAULT_TIDY_COMMAND
from coursegen.errors import CourseConfigError

from .models import TidyConfig


def _normalize_names(value: str | list[object] | None) -> list[str]:
    """Normalize a filter name list into non-empty strings."""
    if isinstance(value, str):
        return [segment for segment in value.replace(",", " ").split() if segment]
    if isinstance(value, list):
        normalized: list[str] = []
        for segment in value:
            text = str(segment).strip()
            if text:
                normalized.append(text)
        return normalized
    return []


def _optional_path(value: object | None, *, base: Path) -> Path | None:
    """Return ``value`` as a path resolved against ``base``, or None when unset."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    path = Path(text).expanduser()
    return path if path.is_absolute() else base / path


def _coerce_bool(value: object, *, field: str) -> bool:
    """Accept YAML booleans only, rejecting strings such as ``"no"``."""
    if isinstance(value, bool):
        return value
    msg = f"'{field}' must be true or false, got {value!r}."
    raise CourseConfigError(msg)


def _build_tidy_config(raw: typ.Mapping[str, typ.Any] | None) -> TidyConfig:
    """Build the formatter settings from the optional ``tidy`` mapping."""
    if not raw:
        return TidyConfig()
    args = raw.get("args", list(DEFAULT_TIDY_ARGS))
    if isinstance(args, str):
        args = shlex.split(args)
    return TidyConfig(
        enabled=_coerce_bool(raw.get("enabled", False), field="tidy.enabled"),
        command=str(raw.get("command") or DEFAULT_TIDY_COMMAND),
        args=[str(arg) for arg in args],
        backup=_coerce_bool(raw.get("backup", False), field="tidy.backup"),
    )
