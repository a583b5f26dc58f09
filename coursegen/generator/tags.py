"""Tokenize step bodies into plain text and bracket tags.

Course content marks cross-references and media with square-bracket tags such
as ``[link to="intro"]Introduction[/link]`` or ``[img name="logo.png" /]``.
:func:`tokenize` walks a body once, left to right, and yields a flat list of
:class:`Text` and :class:`Tag` tokens. Both passes (symbol collection and
reference resolution) consume this token stream so they agree on what counts
as a tag.

Rules
-----
* Only the names in :data:`KNOWN_TAGS` are recognised; any other bracketed
  text is left as plain text.
* Attribute values may be double quoted, single quoted, or bare.
* ``glossary``, ``link`` and ``local`` are paired with the first following
  ``[/name]``. Their bodies are tokenized recursively.
* An unclosed ``[glossary term="x"]`` is a reference; an unclosed ``link`` or
  ``local`` stays as text.

Examples
--------
>>> from coursegen.generator.tags import Tag, tokenize
>>> tokens = tokenize('See [link to="a"]here[/link].')
>>> [type(token).__name__ for token in tokens]
['Text', 'Tag', 'Text']
>>> tokens[1].attrs
{'to': 'a'}
"""

from __future__ import annotations

import dataclasses as dc
import re

KNOWN_TAGS = frozenset(
    {"target", "glossary", "img", "anim", "applet", "local", "link", "ref", "clear"}
)
PAIRED_TAGS = frozenset({"glossary", "link", "local"})

OPEN_TAG_PATTERN = re.compile(
    r"""\[(?P<name>[A-Za-z]+)
        (?P<attrs>(?:\s+[A-Za-z_][\w-]*\s*=\s*(?:"[^"]*"|'[^']*'|[^\s\]"'/]+))*)
        \s*(?P<close>/)?\s*\]""",
    re.VERBOSE,
)
ATTR_PATTERN = re.compile(
    r"""(?P<key>[A-Za-z_][\w-]*)\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s\]"'/]+))"""
)


@dc.dataclass(slots=True)
class Text:
    """A run of plain content between tags."""

    text: str


@dc.dataclass(slots=True)
class Tag:
    """A recognised bracket tag.

    Attributes
    ----------
    name : str
        Lower-cased tag name.
    attrs : dict[str, str]
        Attribute values keyed by lower-cased attribute name.
    raw : str
        The complete source text of the tag, including any body and closing
        tag, for verbatim fallback.
    body : list[Text | Tag] or None
        Tokenized body for paired tags that found their closing tag.
    body_source : str or None
        Untokenized body text.
    """

    name: str
    attrs: dict[str, str]
    raw: str
    body: list[Token] | None = None
    body_source: str | None = None

    @property
    def paired(self) -> bool:
        """Return True when the tag enclosed a body."""
        return self.body is not None


Token = Text | Tag


def parse_attributes(source: str) -> dict[str, str]:
    """Return the attributes declared in ``source`` with lower-cased keys."""
    attrs: dict[str, str] = {}
    for match in ATTR_PATTERN.finditer(source):
        value = match.group("dq")
        if value is None:
            value = match.group("sq")
        if value is None:
            value = match.group("bare")
        attrs[match.group("key").lower()] = value
    return attrs


def tokenize(source: str) -> list[Token]:
    """Split ``source`` into text and tag tokens."""
    tokens: list[Token] = []
    buffer: list[str] = []
    pos = 0
    length = len(source)

    def flush() -> None:
        if buffer:
            tokens.append(Text("".join(buffer)))
            buffer.clear()

    while pos < length:
        start = source.find("[", pos)
        if start < 0:
            buffer.append(source[pos:])
            break
        buffer.append(source[pos:start])
        match = OPEN_TAG_PATTERN.match(source, start)
        if match is None or match.group("name").lower() not in KNOWN_TAGS:
            buffer.append("[")
            pos = start + 1
            continue

        name = match.group("name").lower()
        attrs = parse_attributes(match.group("attrs"))
        end = match.end()
        if name in PAIRED_TAGS and not match.group("close"):
            close = re.compile(rf"\[/\s*{name}\s*\]", re.IGNORECASE).search(source, end)
            if close is not None:
                body_source = source[end : close.start()]
                flush()
                tokens.append(
                    Tag(
                        name=name,
                        attrs=attrs,
                        raw=source[start : close.end()],
                        body=tokenize(body_source),
                        body_source=body_source,
                    )
                )
                pos = close.end()
                continue
            if name != "glossary":
                buffer.append(match.group(0))
                pos = end
                continue

        flush()
        tokens.append(Tag(name=name, attrs=attrs, raw=match.group(0)))
        pos = end

    flush()
    return tokens


def iter_tags(tokens: list[Token]) -> list[Tag]:
    """Return every tag in ``tokens``, including those nested in bodies."""
    found: list[Tag] = []
    for token in tokens:
        if isinstance(token, Tag):
            found.append(token)
            if token.body:
                found.extend(iter_tags(token.body))
    return found


__all__ = [
    "KNOWN_TAGS",
    "PAIRED_TAGS",
    "Tag",
    "Text",
    "Token",
    "iter_tags",
    "parse_attributes",
    "tokenize",
]
