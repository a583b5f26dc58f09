"""Exception types raised while configuring or building a course package.

Configuration problems derive from :class:`ValueError` so callers can treat
them like other invalid-input failures. Problems that abort a build derive
from :class:`CourseBuildError`. Recoverable content problems are never raised;
they are rendered inline and recorded on the
:class:`~coursegen.diagnostics.BuildReport`.
"""

from __future__ import annotations


class CourseConfigError(ValueError):
    """Raised when the build configuration or course metadata is invalid."""


class CourseBuildError(RuntimeError):
    """Base class for errors that abort a course build."""


class AnchorRedefinitionError(CourseBuildError):
    """Raised when an anchor name is defined by more than one included step."""


class GlossaryRedefinitionError(CourseBuildError):
    """Raised when a glossary term receives a second definition body."""


class MissingIndexOrderError(CourseBuildError):
    """Raised when an included theme or module has no ``indexorder``."""


class EmptyModuleError(CourseBuildError):
    """Raised when an included module has no included steps."""


class StepFormatError(CourseBuildError):
    """Raised when a step source file lacks a title or body."""


class TemplateError(CourseBuildError):
    """Raised when a page template is missing or fails to render."""


class OutputWriteError(CourseBuildError):
    """Raised when a generated file cannot be written."""


class FormatterError(CourseBuildError):
    """Raised when the external HTML formatter is missing or fails."""


class MediaCleanupError(CourseBuildError):
    """Raised when the media directory cannot be reconciled."""


class CourseInfoError(CourseBuildError):
    """Raised when no course information block survives filtering."""


__all__ = [
    "AnchorRedefinitionError",
    "CourseBuildError",
    "CourseConfigError",
    "CourseInfoError",
    "EmptyModuleError",
    "FormatterError",
    "GlossaryRedefinitionError",
    "MediaCleanupError",
    "MissingIndexOrderError",
    "OutputWriteError",
    "StepFormatError",
    "TemplateError",
]
