"""Cyclopts CLI entrypoint for building course packages.

The ``coursegen`` console script loads a ``course.yaml`` build configuration,
applies command-line overrides and writes the complete course package:
step pages, theme and course indexes, the glossary, the references page and
a cleaned media directory. Every option can also be set through a
``COURSEGEN_`` environment variable.

Examples
--------
Build the course described by the default configuration:

>>> from coursegen.cli import main
>>> main()  # doctest: +SKIP

Build only the content tagged ``web`` into a custom directory:

>>> from coursegen.cli import app
>>> app(
...     ["build", "--filter", "web", "--output", "dist"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .builder import CourseBuilder
from .config import BuildConfig, build_config_from_mapping, load_build_config

DEFAULT_CONFIG = Path("config/course.yaml")

app = App(name="coursegen", config=cyclopts.config.Env("COURSEGEN_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _resolve_config(
    config: Path,
    *,
    source: Path | None,
    output: Path | None,
    filters: list[str] | None,
    tidy: bool | None,
) -> BuildConfig:
    """Load ``config`` (or start from ``--source`` alone) and apply overrides."""
    if config.exists():
        build_config = load_build_config(config)
    elif source is not None:
        build_config = build_config_from_mapping(
            {"build": {"source": str(source)}}, base=Path.cwd()
        )
    else:
        msg = f"Configuration file '{config}' not found and no --source given."
        raise FileNotFoundError(msg)

    if source is not None:
        build_config.source_dir = source
    if output is not None:
        build_config.output_dir = output
    if filters:
        build_config.filters = list(filters)
    if tidy is not None:
        build_config.tidy.enabled = tidy
    return build_config


@app.command(help="Build the course package described by a course.yaml file.")
def build(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to build config", env_var="COURSEGEN_CONFIG")
    ] = DEFAULT_CONFIG,
    source: typ.Annotated[
        Path | None,
        Parameter(help="Override the course source directory", env_var="COURSEGEN_SOURCE"),
    ] = None,
    output: typ.Annotated[
        Path | None,
        Parameter(help="Override the output directory", env_var="COURSEGEN_OUTPUT"),
    ] = None,
    filter: typ.Annotated[  # noqa: A002
        list[str] | None,
        Parameter(help="Active content filter (repeatable)", env_var="COURSEGEN_FILTER"),
    ] = None,
    tidy: typ.Annotated[
        bool | None,
        Parameter(help="Run the HTML formatter over written pages"),
    ] = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Log build progress", env_var="COURSEGEN_VERBOSE")
    ] = False,
) -> None:
    """Build a course package.

    Parameters
    ----------
    config : Path, optional
        Path to the ``course.yaml`` build configuration (overridable via
        ``COURSEGEN_CONFIG``). It may be absent when ``source`` is given.
    source : Path or None, optional
        Course content tree to build instead of ``build.source``.
    output : Path or None, optional
        Output directory to use instead of ``build.output``.
    filter : list[str] or None, optional
        Filter names replacing ``build.filters``.
    tidy : bool or None, optional
        Enable or disable the HTML formatter; ``None`` keeps the file value.
    verbose : bool, optional
        Log progress at ``DEBUG`` instead of ``WARNING``.

    Returns
    -------
    None
        Writes the course package and prints each generated path.

    Raises
    ------
    FileNotFoundError
        If neither the configuration file nor ``source`` is available.
    CourseBuildError
        If the build hits a fatal content or output problem.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    build_config = _resolve_config(
        config, source=source, output=output, filters=filter, tidy=tidy
    )
    report = CourseBuilder(build_config).run()
    for path in report.written:
        print(f"wrote {_format_path(path)}")
    if report.warnings:
        print(f"{len(report.warnings)} warning(s); see the log for details")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``coursegen`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
