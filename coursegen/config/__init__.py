"""Load and validate build configuration YAML for course package builds.

This subpackage parses a ``course.yaml`` file, applies defaults, resolves
relative paths against the configuration file, and produces typed
dataclasses (:class:`BuildConfig`, :class:`TidyConfig`) that the builder
consumes. The primary entry point is :func:`load_build_config`.

Examples
--------
>>> from pathlib import Path
>>> from coursegen.config import load_build_config
>>> config = load_build_config(Path("config/course.yaml"))  # doctest: +SKIP
>>> config.output_dir  # doctest: +SKIP
PosixPath('config/public')
"""

from .loader import build_config_from_mapping, load_build_config
from .models import BuildConfig, TidyConfig

__all__ = [
    "BuildConfig",
    "TidyConfig",
    "build_config_from_mapping",
    "load_build_config",
]
