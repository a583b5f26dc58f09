"""Unit tests for the bracket tag tokenizer."""

from __future__ import annotations

from coursegen.generator.tags import Tag, Text, iter_tags, parse_attributes, tokenize


def test_parse_attributes_accepts_all_quote_styles() -> None:
    """Double quoted, single quoted and bare values should all be read."""
    attrs = parse_attributes(' name="logo.png" ALIGN=\'left\' width=40')
    assert attrs == {"name": "logo.png", "align": "left", "width": "40"}, (
        "Expected attribute keys lower-cased and values unquoted"
    )


def test_tokenize_splits_text_and_tags() -> None:
    """Tags should be separated from the surrounding text."""
    tokens = tokenize('Intro [img name="a.png" /] outro')
    assert [type(token) for token in tokens] == [Text, Tag, Text], (
        "Expected text, tag, text tokens"
    )
    tag = tokens[1]
    assert isinstance(tag, Tag)
    assert tag.name == "img", "Expected the tag name to be recognised"
    assert not tag.paired, "Self-closing tags should not carry a body"


def test_unknown_tags_stay_as_text() -> None:
    """Bracketed text that is not a known tag should be left alone."""
    source = "Array [0] and [bold]x[/bold]"
    tokens = tokenize(source)
    assert tokens == [Text(source)], "Expected unknown brackets to stay verbatim"


def test_paired_tag_takes_first_closing_tag() -> None:
    """Paired tags should close on the first matching end tag."""
    tokens = tokenize('[link to="a"]one[/link] and [link to="b"]two[/link]')
    links = [token for token in tokens if isinstance(token, Tag)]
    assert [link.body_source for link in links] == ["one", "two"], (
        "Expected each link to enclose only its own text"
    )


def test_unclosed_glossary_is_a_reference() -> None:
    """A glossary tag without an end tag should still be a tag."""
    tokens = tokenize('Use a [glossary term="router"] here.')
    tags = [token for token in tokens if isinstance(token, Tag)]
    assert len(tags) == 1, "Expected one glossary tag"
    assert tags[0].attrs["term"] == "router"
    assert not tags[0].paired, "Expected an unclosed glossary tag to be a reference"


def test_unclosed_link_stays_as_text() -> None:
    """A link tag without an end tag should be kept as text."""
    source = 'Broken [link to="a"] link'
    tokens = tokenize(source)
    assert "".join(token.text for token in tokens if isinstance(token, Text)) == source, (
        "Expected the unclosed link to pass through unchanged"
    )


def test_iter_tags_finds_nested_tags() -> None:
    """Tags inside paired bodies should be reported too."""
    tokens = tokenize('[local text="t"][glossary term="hub"] and [img name="x.png" /][/local]')
    names = [tag.name for tag in iter_tags(tokens)]
    assert names == ["local", "glossary", "img"], "Expected nested tags in document order"
