"""Generate static HTML course packages from tagged step sources.

A course is a tree of themes, modules and steps. This package numbers the
steps, resolves the bracket tags in their bodies (cross-references, glossary
terms, media, citations and popups), renders every page with Jinja templates
and prunes the media directory down to the files the pages use.

Exports
-------
- ``app``: Cyclopts application with the ``build`` command.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from coursegen import main
>>> main()  # doctest: +SKIP
>>> from coursegen import app
>>> app.name[0]
'coursegen'
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
