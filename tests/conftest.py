"""Shared fixtures that lay out a small course content tree on disk.

The sample course has two themes:

``networks``
    ``basics`` (three steps, including ``step10.html`` to exercise numeric
    ordering) and ``routing`` (three sources, one of them visible only to the
    ``staff`` filter).
``security``
    ``firewalls`` (one step linking back to the networks theme anchor).

The media directory holds files the pages use, a forced file and one file
nothing references.
"""

from __future__ import annotations

import typing as typ

import pytest

from coursegen.config import BuildConfig
from coursegen.diagnostics import BuildReport
from coursegen.generator import SymbolTableBuilder
from coursegen.tree import ResourceFilter, load_course

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from coursegen.generator import SymbolTables
    from coursegen.tree import Course

COURSE_METADATA = """
course:
  title: Networking Basics
  version: "1.2"
  extrahead: '<link rel="stylesheet" href="{COURSE_BASE}/extra.css" />'
  splash: splash.png
  message: "Welcome to **networking**."
  forcemedia: [forced.css]
""".lstrip()

NETWORKS_METADATA = """
theme:
  title: Networks
  indexorder: 1
  modules:
    basics:
      title: Basics
      level: beginner
      indexorder: 1
      leadsto: [routing]
    routing:
      title: Routing
      level: intermediate
      indexorder: 2
      prerequisites: [basics]
      steps:
        Staff notes:
          filters:
            include: [staff]
""".lstrip()

SECURITY_METADATA = """
theme:
  title: Security
  indexorder: 2
  modules:
    firewalls:
      title: Firewalls
      level: advanced
      indexorder: 1
""".lstrip()

STEPS: dict[str, tuple[str, str]] = {
    "networks/basics/step1.html": (
        "What is a network",
        '[target name="intro"]A network joins hosts. '
        '[glossary term="Packet"]A unit of data on the wire.[/glossary] '
        '[img name="diagram.png" align="right" /] '
        '[ref id="tanenbaum" type="book" author="Tanenbaum, Andrew" '
        'booktitle="Computer Networks" publisher="Pearson" location="Boston" '
        'date="2010"]',
    ),
    "networks/basics/step2.html": (
        "Packets",
        'Every [glossary term="packet"] follows a route; see '
        '[link to="routes"]routing[/link]. '
        '[local text="Example"][img name="popup.png" /][/local]',
    ),
    "networks/basics/step10.html": (
        "Summary",
        'Back to the [link to="intro"]start[/link] or [link to="missing"]nowhere[/link].',
    ),
    "networks/routing/step1.html": (
        "Routes",
        '[target name="routes"]Routers forward packets [ref id="tanenbaum"].',
    ),
    "networks/routing/step2.html": (
        "Staff notes",
        '[glossary term="Subnet"]A slice of an address range.[/glossary]',
    ),
    "networks/routing/step3.html": (
        "Next hops",
        'Each [glossary term="Subnet"] has a gateway.',
    ),
    "security/firewalls/step1.html": (
        "Firewalls",
        'Firewalls protect [link to="AUTO-Networks"]the network[/link].',
    ),
}

MEDIA_FILES = ("splash.png", "diagram.png", "popup.png", "forced.css", "unused.png")


def step_document(title: str, body: str) -> str:
    """Return a step source document with ``title`` and ``body``."""
    return (
        f"<html>\n<head><title>{title}</title></head>\n"
        f"<body>\n{body}\n</body>\n</html>\n"
    )


def write_step(root: Path, relative: str, title: str, body: str) -> Path:
    """Write one step source under ``root`` and return its path."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(step_document(title, body), encoding="utf-8")
    return path


def write_course(root: Path) -> Path:
    """Lay out the sample course under ``root`` and return ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "metadata.yaml").write_text(COURSE_METADATA, encoding="utf-8")
    for theme, metadata in (("networks", NETWORKS_METADATA), ("security", SECURITY_METADATA)):
        (root / theme).mkdir(exist_ok=True)
        (root / theme / "metadata.yaml").write_text(metadata, encoding="utf-8")
    for relative, (title, body) in STEPS.items():
        write_step(root, relative, title, body)
    media = root / "media"
    media.mkdir(exist_ok=True)
    for name in MEDIA_FILES:
        (media / name).write_bytes(name.encode("utf-8"))
    return root


@pytest.fixture
def course_source(tmp_path: Path) -> Path:
    """Return the root of a freshly written sample course."""
    return write_course(tmp_path / "source")


@pytest.fixture
def build_config(course_source: Path, tmp_path: Path) -> BuildConfig:
    """Return a build configuration for the sample course."""
    return BuildConfig(source_dir=course_source, output_dir=tmp_path / "public")


@pytest.fixture
def loaded_course(course_source: Path) -> Course:
    """Return the sample course loaded with no active filters."""
    return load_course(course_source, ResourceFilter())


@pytest.fixture
def symbol_tables(loaded_course: Course) -> SymbolTables:
    """Return frozen symbol tables for the sample course."""
    return SymbolTableBuilder(BuildReport()).build(loaded_course)


@pytest.fixture
def add_step(course_source: Path) -> cabc.Callable[[str, str, str], Path]:
    """Return a helper that writes an extra step into the sample course."""

    def _add(relative: str, title: str, body: str) -> Path:
        return write_step(course_source, relative, title, body)

    return _add


@pytest.fixture
def outjectives_source(course_source: Path) -> Path:
    """Return the sample course with outcomes and objectives on security."""
    meta = course_source / "security" / "metadata.yaml"
    text = meta.read_text(encoding="utf-8")
    text = text.replace(
        "  indexorder: 2\n", "  indexorder: 2\n  objectives: [Secure a small network]\n"
    )
    text = text.replace(
        "      indexorder: 1\n",
        "      indexorder: 1\n"
        "      outcomes: [Configure a packet filter]\n"
        "      objectives:\n"
        "        - Explain stateful inspection\n"
        "        - Compare trust zones\n",
    )
    meta.write_text(text, encoding="utf-8")
    return course_source
