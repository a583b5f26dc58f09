"""Run an external HTML formatter (``tidyp`` by default) over written pages."""

from __future__ import annotations

import logging
import shutil
import subprocess
import typing as typ
from pathlib import Path

from coursegen.errors import FormatterError

if typ.TYPE_CHECKING:
    from coursegen.config.models import TidyConfig
    from coursegen.diagnostics import BuildReport

logger = logging.getLogger(__name__)

# tidy exits with 1 when it only has warnings to report.
_TIDY_WARNINGS_EXIT = 1


class HtmlFormatter:
    """Reformat generated pages in place when formatting is enabled."""

    def __init__(self, config: TidyConfig, report: BuildReport) -> None:
        self.config = config
        self.report = report
        self._executable: str | None = None

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def executable(self) -> str:
        """Return the formatter executable path.

        Raises
        ------
        FormatterError
            If formatting is enabled but the command cannot be found.
        """
        if self._executable is None:
            command = self.config.command
            found = command if Path(command).is_file() else shutil.which(command)
            if not found:
                msg = f"HTML formatter '{command}' was not found; disable tidy or install it."
                raise FormatterError(msg)
            self._executable = found
        return self._executable

    def format(self, path: Path) -> None:
        """Reformat ``path`` in place, optionally keeping a ``.orig`` copy."""
        if not self.enabled:
            return
        executable = self.executable()
        if self.config.backup:
            shutil.copy2(path, path.with_name(f"{path.name}.orig"))
        try:
            result = subprocess.run(  # noqa: S603
                [executable, *self.config.args, "-m", str(path)],
                check=False,
                text=True,
                capture_output=True,
            )
        except OSError as exc:
            msg = f"Unable to run HTML formatter on '{path}': {exc}"
            raise FormatterError(msg) from exc
        output = (result.stderr or result.stdout or "").strip()
        if output:
            self.report.formatter_output.append(f"{path}:\n{output}")
        if result.returncode > _TIDY_WARNINGS_EXIT:
            self.report.warn(
                f"HTML formatter exited with status {result.returncode} for '{path}'."
            )
        logger.debug("formatted %s (exit %d)", path, result.returncode)


__all__ = ["HtmlFormatter"]
