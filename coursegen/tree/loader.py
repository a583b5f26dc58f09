"""Load a course content tree from ``metadata.yaml`` files and step sources.

The source layout is::

    <source>/metadata.yaml              course metadata
    <source>/<theme>/metadata.yaml      theme and module metadata
    <source>/<theme>/<module>/*.html    step sources

Only directories that hold a ``metadata.yaml`` are treated as themes and only
modules declared in a theme's metadata are loaded. Each node's ``excluded``
flag reflects its own filters; parents are not consulted here.
"""

from __future__ import annotations

import logging
import re
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from coursegen._constants import METADATA_FILENAME, OUTJECTIVES_SOURCE
from coursegen.errors import CourseConfigError, StepFormatError

from .filters import ResourceFilter, ResourceFilters
from .models import Course, CourseInfo, MapFragment, Module, Step, Theme

logger = logging.getLogger(__name__)

STEP_DOCUMENT_PATTERN = re.compile(
    r"<title>\s*(?P<title>.*?)\s*</title>.*<body.*?>\s*(?P<body>.*?)\s*</body>",
    re.DOTALL | re.IGNORECASE,
)


def load_course(source_dir: Path, resource_filter: ResourceFilter) -> Course:
    """Load the course rooted at ``source_dir``.

    Parameters
    ----------
    source_dir : Path
        Root of the content tree.
    resource_filter : ResourceFilter
        Active filters used to flag excluded themes, modules and steps.

    Returns
    -------
    Course
        The loaded tree with per-node ``excluded`` flags set.

    Raises
    ------
    FileNotFoundError
        If ``source_dir`` or its ``metadata.yaml`` is missing.
    CourseConfigError
        If metadata is structurally invalid.
    StepFormatError
        If a step source lacks a ``<title>`` or ``<body>``.
    """
    course_meta = source_dir / METADATA_FILENAME
    if not course_meta.exists():
        msg = f"Course metadata '{course_meta}' not found."
        raise FileNotFoundError(msg)
    raw = _read_yaml(course_meta)
    course = _build_course(raw.get("course", raw), course_meta)

    for theme_dir in sorted(path for path in source_dir.iterdir() if path.is_dir()):
        theme_meta = theme_dir / METADATA_FILENAME
        if not theme_meta.exists():
            continue
        theme = _build_theme(theme_dir, theme_meta, resource_filter)
        course.themes[theme.name] = theme
        logger.debug("loaded theme %s (%d modules)", theme.name, len(theme.modules))
    return course


def parse_step_document(text: str, source: Path) -> tuple[str, str]:
    """Return the ``(title, body)`` of a step source document."""
    match = STEP_DOCUMENT_PATTERN.search(text)
    if match is None:
        msg = f"Unable to locate a title and body in step '{source}'."
        raise StepFormatError(msg)
    return match.group("title"), match.group("body")


def _read_yaml(path: Path) -> dict[str, typ.Any]:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = f"Metadata '{path}' must contain a mapping."
        raise CourseConfigError(msg)
    return dict(loaded)


def _mapping(value: object, *, where: str) -> dict[str, typ.Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{where}' must be a mapping."
        raise CourseConfigError(msg)
    return value


def _optional_int(value: object, *, where: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        msg = f"'{where}' must be an integer, got {value!r}."
        raise CourseConfigError(msg) from exc


def _names(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


def _texts(value: object, *, where: str) -> list[str]:
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    texts: list[str] = []
    for item in items:
        if isinstance(item, dict | list):
            msg = f"'{where}' entries must be text, got {item!r}."
            raise CourseConfigError(msg)
        text = str(item).strip()
        if text:
            texts.append(text)
    return texts


def _build_maps(raw: object, *, where: str) -> list[MapFragment]:
    if raw is None:
        return []
    items = raw if isinstance(raw, list) else [raw]
    maps: list[MapFragment] = []
    for item in items:
        match item:
            case str():
                maps.append(MapFragment(html=item))
            case dict():
                maps.append(
                    MapFragment(
                        html=str(item.get("html", "")),
                        filters=ResourceFilters.from_mapping(item.get("filters")),
                    )
                )
            case _:
                msg = f"Unsupported map entry in '{where}': {item!r}."
                raise CourseConfigError(msg)
    return maps


def _build_courseinfo(raw: typ.Mapping[str, typ.Any], where: str) -> CourseInfo:
    media_type = str(raw.get("type", "image")).lower()
    if media_type not in {"image", "anim"}:
        msg = f"'{where}.type' must be 'image' or 'anim', got {media_type!r}."
        raise CourseConfigError(msg)
    return CourseInfo(
        splash=raw.get("splash"),
        width=_optional_int(raw.get("width"), where=f"{where}.width"),
        height=_optional_int(raw.get("height"), where=f"{where}.height"),
        media_type=media_type,
        message=str(raw.get("message", "") or ""),
        filters=ResourceFilters.from_mapping(raw.get("filters")),
    )


def _build_course(raw: typ.Mapping[str, typ.Any], path: Path) -> Course:
    title = raw.get("title")
    if not title:
        msg = f"Course metadata '{path}' has no title."
        raise CourseConfigError(msg)

    info_raw = raw.get("courseinfo")
    if info_raw is None:
        info_raw = [raw] if raw.get("splash") or raw.get("message") else []
    elif isinstance(info_raw, dict):
        info_raw = [info_raw]
    courseinfo = [
        _build_courseinfo(_mapping(item, where="courseinfo"), "courseinfo")
        for item in info_raw
    ]

    return Course(
        title=str(title),
        version=str(raw.get("version", "") or ""),
        extrahead=str(raw.get("extrahead", "") or ""),
        courseinfo=courseinfo,
        maps=_build_maps(raw.get("maps"), where="course.maps"),
        forcemedia=_names(raw.get("forcemedia")),
    )


def _build_theme(
    theme_dir: Path, meta_path: Path, resource_filter: ResourceFilter
) -> Theme:
    raw_file = _read_yaml(meta_path)
    raw = _mapping(raw_file.get("theme", raw_file), where=f"{meta_path}: theme")
    name = theme_dir.name
    filters = ResourceFilters.from_mapping(raw.get("filters"))
    theme = Theme(
        name=name,
        title=str(raw.get("title") or name),
        indexorder=_optional_int(raw.get("indexorder"), where=f"{name}.indexorder"),
        filters=filters,
        excluded=resource_filter.excludes(filters),
        maps=_build_maps(raw.get("maps"), where=f"{name}.maps"),
        objectives=_texts(raw.get("objectives"), where=f"{name}.objectives"),
        outcomes=_texts(raw.get("outcomes"), where=f"{name}.outcomes"),
    )

    modules_raw = _mapping(raw.get("modules"), where=f"{name}.modules")
    for module_name, payload in modules_raw.items():
        module_raw = _mapping(payload, where=f"{name}.modules.{module_name}")
        module = _build_module(
            theme_dir / str(module_name), str(module_name), module_raw, resource_filter
        )
        theme.modules[module.name] = module
    return theme


def _build_module(
    module_dir: Path,
    name: str,
    raw: typ.Mapping[str, typ.Any],
    resource_filter: ResourceFilter,
) -> Module:
    filters = ResourceFilters.from_mapping(raw.get("filters"))
    module = Module(
        name=name,
        title=str(raw.get("title") or name),
        level=str(raw.get("level", "") or ""),
        indexorder=_optional_int(raw.get("indexorder"), where=f"{name}.indexorder"),
        prerequisites=_names(raw.get("prerequisites")),
        leadsto=_names(raw.get("leadsto")),
        filters=filters,
        excluded=resource_filter.excludes(filters),
        objectives=_texts(raw.get("objectives"), where=f"{name}.objectives"),
        outcomes=_texts(raw.get("outcomes"), where=f"{name}.outcomes"),
    )

    if module.has_outjectives:
        module.steps[OUTJECTIVES_SOURCE] = Step(
            filename=OUTJECTIVES_SOURCE,
            title=module.outjectives_title,
            body="",
            outjectives=True,
        )

    step_filters = _mapping(raw.get("steps"), where=f"{name}.steps")
    if not module_dir.is_dir():
        logger.debug("module directory %s is missing", module_dir)
        return module
    for source in sorted(module_dir.glob("*.html")):
        title, body = parse_step_document(source.read_text(encoding="utf-8"), source)
        step_raw = _mapping(step_filters.get(title), where=f"{name}.steps.{title}")
        filters = ResourceFilters.from_mapping(step_raw.get("filters"))
        module.steps[source.name] = Step(
            filename=source.name,
            title=title,
            body=body,
            filters=filters,
            excluded=resource_filter.excludes(filters),
        )
    return module


__all__ = ["STEP_DOCUMENT_PATTERN", "load_course", "parse_step_document"]
