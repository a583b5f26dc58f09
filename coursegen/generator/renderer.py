"""Jinja rendering shared by every page and fragment the generator emits."""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from jinja2 import (
    Environment,
    FileSystemLoader,
    TemplateError as JinjaTemplateError,
    TemplateNotFound,
    select_autoescape,
)

from coursegen.errors import OutputWriteError, TemplateError

if typ.TYPE_CHECKING:
    from jinja2 import Template

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"


class TemplateRenderer:
    """Load templates from one directory and write rendered pages to disk."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        """Initialize the Jinja environment.

        Parameters
        ----------
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package
            templates.
        """
        self.templates_dir = templates_dir or DEFAULT_TEMPLATES_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._macros: dict[str, typ.Any] = {}

    def template(self, name: str) -> Template:
        """Return the named template.

        Raises
        ------
        TemplateError
            If the template does not exist or fails to compile.
        """
        try:
            return self.env.get_template(name)
        except TemplateNotFound as exc:
            msg = f"Template '{name}' not found in {self.templates_dir}."
            raise TemplateError(msg) from exc
        except JinjaTemplateError as exc:
            msg = f"Template '{name}' could not be loaded: {exc}"
            raise TemplateError(msg) from exc

    def render(self, name: str, **context: typ.Any) -> str:
        """Render the named template with ``context``."""
        try:
            return self.template(name).render(**context)
        except JinjaTemplateError as exc:
            msg = f"Template '{name}' failed to render: {exc}"
            raise TemplateError(msg) from exc

    def macros(self, name: str) -> typ.Any:
        """Return the exported macros of a fragment template, cached by name."""
        if name not in self._macros:
            self._macros[name] = self.template(name).module
        return self._macros[name]

    def write(self, name: str, path: Path, **context: typ.Any) -> Path:
        """Render the named template and write it to ``path`` as UTF-8.

        Raises
        ------
        OutputWriteError
            If the file or its parent directory cannot be written.
        """
        html = self.render(name, **context)
        return write_text(path, html)


def write_text(path: Path, text: str) -> Path:
    """Write ``text`` to ``path``, creating parent directories."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        msg = f"Unable to write '{path}': {exc}"
        raise OutputWriteError(msg) from exc
    logger.debug("rendered %s", path)
    return path


__all__ = ["DEFAULT_TEMPLATES_DIR", "TemplateRenderer", "write_text"]
