"""Second pass: rewrite bracket tags in a page body into final markup.

:class:`ReferenceResolver` consumes the frozen symbol tables and never
modifies them. Each body is tokenized once and rendered left to right; plain
content passes through untouched and unknown bracket text is kept verbatim.

Problems an author can fix (a link to an anchor that does not exist, an image
tag without a name) never stop the build. They render as visible ``error``
markup in the page and are recorded as warnings on the build report.

Relative links depend on where the page lives:

========  ===========================  ==========
level     page                         prefix
========  ===========================  ==========
step      ``theme/module/stepNN.html`` ``../../``
theme     ``theme/index.html``         ``../``
glossary  ``glossary/a.html``          ``../``
course    ``courseindex.html``         (none)
========  ===========================  ==========
"""

from __future__ import annotations

import base64
import dataclasses as dc
import typing as typ

from coursegen._constants import DEFAULT_MEDIA_DIR, GLOSSARY_DIR

from .references import compress_citations, convert_citation
from .symbols import glossary_bucket, glossary_key
from .tags import Tag, Text, Token, tokenize

if typ.TYPE_CHECKING:
    from coursegen.diagnostics import BuildReport
    from coursegen.tree.models import Course

    from .renderer import TemplateRenderer
    from .symbols import SymbolTables

LEVEL_PREFIXES: dict[str, str] = {
    "step": "../../",
    "theme": "../",
    "glossary": "../",
    "course": "",
}

ALIGNMENT_CLASSES: dict[str, str] = {
    "left": "floatleft",
    "right": "floatright",
    "center": "center",
}


def level_prefix(level: str) -> str:
    """Return the relative path from a page at ``level`` to the course root."""
    try:
        return LEVEL_PREFIXES[level]
    except KeyError as exc:
        msg = f"Unknown page level '{level}'."
        raise ValueError(msg) from exc


def alignment_class(align: str | None) -> str:
    """Map an ``align`` attribute onto a media container class."""
    return ALIGNMENT_CLASSES.get((align or "").strip().lower(), "floatleft")


@dc.dataclass(frozen=True, slots=True)
class _Page:
    prefix: str
    where: str


class ReferenceResolver:
    """Convert bracket tags into links, media markup and popups."""

    def __init__(
        self,
        course: Course,
        tables: SymbolTables,
        renderer: TemplateRenderer,
        report: BuildReport,
        *,
        media_dir: str = DEFAULT_MEDIA_DIR,
    ) -> None:
        self.course = course
        self.tables = tables
        self.report = report
        self.media_dir = media_dir
        self.fragments = renderer.macros("fragments.jinja")

    def resolve(
        self,
        body: str,
        theme: str | None = None,
        module: str | None = None,
        output_id: int | None = None,
        level: str = "step",
    ) -> str:
        """Return ``body`` with every recognised tag converted.

        Parameters
        ----------
        body : str
            Tagged HTML content.
        theme, module, output_id : optional
            Identify the page being resolved, for diagnostics.
        level : str
            Page level, selecting the relative link prefix.
        """
        where = "/".join(part for part in (theme, module) if part) or level
        if output_id is not None:
            where = f"{where} step {output_id}"
        page = _Page(prefix=level_prefix(level), where=where)
        return compress_citations(self._render(tokenize(body), page))

    def _render(self, tokens: list[Token], page: _Page) -> str:
        parts: list[str] = []
        for token in tokens:
            if isinstance(token, Text):
                parts.append(token.text)
            else:
                parts.append(self._convert(token, page))
        return "".join(parts)

    def _convert(self, tag: Tag, page: _Page) -> str:
        match tag.name:
            case "link":
                return self._convert_link(tag, page)
            case "target":
                name = tag.attrs.get("name")
                if not name:
                    return self._error(page, "Target tag does not include a name.")
                return str(self.fragments.target(name))
            case "glossary":
                return self._convert_glossary(tag, page)
            case "img":
                return self._convert_image(tag, page)
            case "anim":
                return self._convert_anim(tag, page)
            case "applet":
                return self._error(page, "Applets are no longer supported.")
            case "local":
                return self._convert_local(tag, page)
            case "clear":
                return str(self.fragments.clear())
            case "ref":
                ref_id = tag.attrs.get("id")
                if not ref_id:
                    return self._error(page, "Reference tag does not include an id.")
                return convert_citation(ref_id, page.prefix)
            case _:  # pragma: no cover - tokenizer only yields known tags
                return tag.raw

    def _error(self, page: _Page, message: str) -> str:
        self.report.warn(f"{message} ({page.where})")
        return str(self.fragments.error_paragraph(message))

    def _convert_link(self, tag: Tag, page: _Page) -> str:
        text = self._render(tag.body or [], page)
        name = tag.attrs.get("to") or tag.attrs.get("name")
        if not name:
            return self._error(page, "Link tag does not include a target.")
        target = self.tables.anchors.lookup(name)
        if target is None:
            message = f"Unable to locate anchor {name}"
            self.report.warn(f"{message} ({page.where})")
            return str(self.fragments.error_span(text, message))
        if target.module is None or target.output_id is None:
            href = f"{page.prefix}{target.theme}/index.html"
        else:
            module = self.course.themes[target.theme].modules[target.module]
            step_file = module.step_filename(target.output_id)
            href = f"{page.prefix}{target.theme}/{target.module}/{step_file}#{name}"
        return str(self.fragments.anchor_link(href, text))

    def _convert_glossary(self, tag: Tag, page: _Page) -> str:
        term = tag.attrs.get("term")
        if not term:
            return self._error(page, "Glossary tag does not include a term.")
        href = (
            f"{page.prefix}{GLOSSARY_DIR}/{glossary_bucket(term)}.html"
            f"#{glossary_key(term)}"
        )
        return str(self.fragments.glossary_link(href, term))

    def _media_src(self, name: str, page: _Page) -> str:
        return f"{page.prefix}{self.media_dir}/{name}"

    def _convert_image(self, tag: Tag, page: _Page) -> str:
        attrs = tag.attrs
        if not attrs.get("name"):
            return self._error(page, "Image tag attribute list does not include name.")
        style = "border: none;"
        if attrs.get("width"):
            style += f" width: {attrs['width']};"
        if attrs.get("height"):
            style += f" height: {attrs['height']};"
        return str(
            self.fragments.image(
                self._media_src(attrs["name"], page),
                alignment_class(attrs.get("align")),
                style,
                attrs.get("alt") or "image",
                attrs.get("title") or "image",
            )
        )

    def _convert_anim(self, tag: Tag, page: _Page) -> str:
        attrs = tag.attrs
        if not attrs.get("name"):
            return self._error(page, "Anim tag attribute list does not include name.")
        if not attrs.get("width") or not attrs.get("height"):
            return self._error(
                page, "Anim tag attribute list is missing width or height information."
            )
        return str(
            self.fragments.anim(
                self._media_src(attrs["name"], page),
                alignment_class(attrs.get("align")),
                attrs["width"],
                attrs["height"],
            )
        )

    def _convert_local(self, tag: Tag, page: _Page) -> str:
        body = self._render(tag.body or [], page)
        encoded = base64.b64encode(body.encode("utf-8")).decode("ascii")
        return str(self.fragments.popup(tag.attrs.get("text", ""), encoded))


__all__ = [
    "LEVEL_PREFIXES",
    "ReferenceResolver",
    "alignment_class",
    "level_prefix",
]
