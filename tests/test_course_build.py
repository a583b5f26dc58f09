"""End-to-end tests for building the sample course package."""

from __future__ import annotations

import json
import typing as typ

import pytest
from bs4 import BeautifulSoup

from coursegen._constants import BUILD_META_FILENAME
from coursegen.builder import CourseBuilder
from coursegen.errors import CourseInfoError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from coursegen.config import BuildConfig


def _soup(path: Path) -> BeautifulSoup:
    return BeautifulSoup(path.read_text(encoding="utf-8"), "html.parser")


@pytest.fixture
def built(build_config: BuildConfig) -> Path:
    """Build the sample course and return the output directory."""
    CourseBuilder(build_config).run()
    return build_config.output_dir


def test_expected_pages_are_written(build_config: BuildConfig) -> None:
    """Every page of the package should be produced."""
    report = CourseBuilder(build_config).run()
    out = build_config.output_dir
    relative = {str(path.relative_to(out)) for path in report.written}
    expected = {
        "networks/basics/step01.html",
        "networks/basics/step02.html",
        "networks/basics/step03.html",
        "networks/routing/step01.html",
        "networks/routing/step02.html",
        "security/firewalls/step01.html",
        "networks/index.html",
        "networks/themeindex.html",
        "security/index.html",
        "security/themeindex.html",
        "courseindex.html",
        "coursemap.html",
        "frontpage.html",
        "references.html",
        "glossary/p.html",
        "glossary/s.html",
        "glossary/index.html",
        "index.html",
    }
    assert relative == expected, f"Unexpected page set: {sorted(relative ^ expected)}"
    assert (out / "course.css").exists(), "Expected framework files to be copied"
    assert not (out / "networks" / "routing" / "step03.html").exists()


def test_build_reports_unresolved_anchor(build_config: BuildConfig) -> None:
    """The one broken link should be the only warning."""
    report = CourseBuilder(build_config).run()
    assert report.warnings == [
        "Unable to locate anchor missing (networks/basics step 3)"
    ], "Expected exactly the unresolved anchor warning"


def test_step_page_navigation(built: Path) -> None:
    """Step pages should link to neighbours and mark the current entries."""
    soup = _soup(built / "networks" / "basics" / "step02.html")
    assert soup.find("link", rel="prev")["href"] == "step01.html"
    assert soup.find("link", rel="next")["href"] == "step03.html"
    theme_menu = soup.find("select", attrs={"data-test": "theme-dropdown"})
    assert theme_menu is not None
    selected = theme_menu.find("option", selected=True)
    assert selected is not None and selected["value"] == "../../networks/index.html"
    module_menu = soup.find("select", attrs={"data-test": "module-dropdown"})
    assert module_menu.find("option", class_="leadsto")["value"] == "../routing/step01.html"
    assert "Step 2 of 3" in soup.get_text()


def test_step_page_links_and_media(built: Path) -> None:
    """Resolved tags should link across modules and into the media directory."""
    soup = _soup(built / "networks" / "basics" / "step02.html")
    link = soup.find("a", class_="anchor-link")
    assert link is not None
    assert link["href"] == "../../networks/routing/step01.html#routes"
    glossary = soup.find("a", class_="glossary")
    assert glossary["href"] == "../../glossary/p.html#packet"
    first = _soup(built / "networks" / "basics" / "step01.html")
    assert first.find("img", src="../../media/diagram.png") is not None
    assert first.find("div", class_="floatright") is not None


def test_extrahead_is_rebased(built: Path) -> None:
    """The course base marker should become the page's relative prefix."""
    soup = _soup(built / "networks" / "basics" / "step01.html")
    assert soup.find("link", href="../../extra.css") is not None
    front = _soup(built / "frontpage.html")
    assert front.find("link", href="extra.css") is not None


def test_media_is_pruned(built: Path) -> None:
    """Only referenced, popup and forced media should remain."""
    names = sorted(path.name for path in (built / "media").iterdir())
    assert names == ["diagram.png", "forced.css", "popup.png", "splash.png"]


def test_references_page_backlinks(built: Path) -> None:
    """The references page should list citing steps in order."""
    soup = _soup(built / "references.html")
    entry = soup.find("li", id="tanenbaum")
    assert entry is not None
    assert "A. Tanenbaum" in entry.get_text()
    hrefs = [link["href"] for link in entry.select(".backlinks a")]
    assert hrefs == ["networks/basics/step01.html", "networks/routing/step01.html"]


def test_course_pages(built: Path) -> None:
    """Course index, map and front page should describe the whole course."""
    index = _soup(built / "courseindex.html")
    assert index.find(id="networks-routing") is not None
    prerequisites = index.find(id="networks-routing").find("p", class_="prerequisites")
    assert prerequisites.find("a")["href"] == "#networks-basics"
    course_map = _soup(built / "coursemap.html")
    cells = course_map.select("table.course-map td a")
    assert [cell["href"] for cell in cells] == ["networks/index.html", "security/index.html"]
    front = _soup(built / "frontpage.html")
    assert front.find("strong").get_text() == "networking"
    assert front.find("img", src="media/splash.png") is not None
    version = front.find(attrs={"data-test": "course-version"})
    assert version is not None and "1.2" in version.get_text()


def test_filter_includes_staff_step(build_config: BuildConfig) -> None:
    """Activating the staff filter should add and renumber steps."""
    build_config.filters = ["staff"]
    CourseBuilder(build_config).run()
    routing = build_config.output_dir / "networks" / "routing"
    assert sorted(path.name for path in routing.iterdir()) == [
        "step01.html",
        "step02.html",
        "step03.html",
    ]
    assert "Staff notes" in _soup(routing / "step02.html").find("h1").get_text()


def test_build_metadata(built: Path) -> None:
    """Build metadata should record the first page and counts."""
    payload = json.loads((built / BUILD_META_FILENAME).read_text(encoding="utf-8"))
    assert payload["first_file"] == "networks/basics/step01.html"
    assert payload["steps"] == 6
    assert payload["glossary_terms"] == 2


def test_missing_courseinfo_aborts(build_config: BuildConfig) -> None:
    """A course without a front page block should abort the build."""
    meta = build_config.source_dir / "metadata.yaml"
    text = meta.read_text(encoding="utf-8")
    text = text.replace("  splash: splash.png\n", "").replace(
        '  message: "Welcome to **networking**."\n', ""
    )
    meta.write_text(text, encoding="utf-8")
    with pytest.raises(CourseInfoError):
        CourseBuilder(build_config).run()


def test_module_menu_shows_levels(built: Path) -> None:
    """Module dropdown options should carry each module's level."""
    soup = _soup(built / "networks" / "basics" / "step01.html")
    module_menu = soup.find("select", attrs={"data-test": "module-dropdown"})
    levels = [option.get("data-level") for option in module_menu.find_all("option")]
    assert levels == ["beginner", "intermediate"], f"unexpected levels {levels!r}"
    assert "level-intermediate" in module_menu.find_all("option")[1]["class"]


def test_excluded_only_term_is_not_listed(
    build_config: BuildConfig, add_step: cabc.Callable[[str, str, str], Path]
) -> None:
    """A term defined in an excluded step and used nowhere else gets no entry."""
    add_step(
        "networks/routing/step4.html",
        "Staff notes",
        '[glossary term="Quarantine"]An isolated network segment.[/glossary]',
    )
    report = CourseBuilder(build_config).run()
    glossary = build_config.output_dir / "glossary"
    assert not (glossary / "q.html").exists(), "Expected no page for an unused bucket"
    for page in glossary.glob("*.html"):
        soup = _soup(page)
        assert soup.find("dt", id="quarantine") is None, f"unexpected term on {page.name}"
        assert "Quarantine" not in soup.get_text(), f"unexpected mention on {page.name}"
    bar = _soup(glossary / "index.html").find("ul", class_="glossary-index")
    marker = next(item for item in bar.find_all("li") if item.get_text() == "Q")
    assert marker["class"] == ["notindexed"], f"unexpected marker {marker!r}"
    assert not any("Quarantine" in warning for warning in report.warnings)


def test_outjectives_pages(build_config: BuildConfig, outjectives_source: Path) -> None:
    """Listed outcomes and objectives should add a leading step and a theme page."""
    report = CourseBuilder(build_config).run()
    out = build_config.output_dir
    relative = {str(path.relative_to(out)) for path in report.written}
    assert {
        "security/firewalls/step01.html",
        "security/firewalls/step02.html",
        "security/outjectives.html",
    } <= relative, f"missing outcomes pages in {sorted(relative)}"
    assert "networks/outjectives.html" not in relative

    step = _soup(out / "security" / "firewalls" / "step01.html")
    assert step.find("h1").get_text() == "Outcomes and Objectives"
    block = step.find(attrs={"data-test": "module-outjectives"})
    assert block is not None, "expected the outcomes block on the first step"
    assert [item.get_text() for item in block.select("li.objective")] == [
        "Explain stateful inspection",
        "Compare trust zones",
    ]
    assert step.find("link", rel="next")["href"] == "step02.html"
    first_option = step.find("select", attrs={"data-test": "module-dropdown"}).find("option")
    assert first_option["value"] == "../outjectives.html"

    authored = _soup(out / "security" / "firewalls" / "step02.html")
    assert authored.find("h1").get_text() == "Firewalls"

    theme_page = _soup(out / "security" / "outjectives.html")
    theme_block = theme_page.find(attrs={"data-test": "theme-outjectives"})
    assert [item.get_text() for item in theme_block.select("li.objective")] == [
        "Secure a small network"
    ]
    module = theme_page.find("div", id="firewalls")
    assert module.find("a")["href"] == "firewalls/step01.html"
    assert [item.get_text() for item in module.select("li.outcome")] == [
        "Configure a packet filter"
    ]
    theme_map = _soup(out / "security" / "index.html")
    assert theme_map.find(attrs={"data-test": "outjectives-link"}) is not None
    networks_map = _soup(out / "networks" / "index.html")
    assert networks_map.find(attrs={"data-test": "outjectives-link"}) is None
