"""Steps shared by the course build behaviour tests."""

from __future__ import annotations

import typing as typ

import pytest
from pytest_bdd import given, parsers, when

from coursegen.builder import CourseBuilder
from coursegen.config import BuildConfig

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@given("the sample course source")
def given_sample_course(
    course_source: Path, tmp_path: Path, scenario_state: dict[str, object]
) -> None:
    """Register a build configuration for the sample course."""
    scenario_state["config"] = BuildConfig(
        source_dir=course_source, output_dir=tmp_path / "public"
    )


@given(parsers.parse('the "{name}" filter is active'))
def given_filter_active(name: str, scenario_state: dict[str, object]) -> None:
    """Add ``name`` to the active content filters."""
    config: BuildConfig = scenario_state["config"]  # type: ignore[assignment]
    config.filters.append(name)


@when("I build the course")
def when_build_course(scenario_state: dict[str, object]) -> None:
    """Run a complete build and keep its report."""
    config: BuildConfig = scenario_state["config"]  # type: ignore[assignment]
    scenario_state["report"] = CourseBuilder(config).run()
    scenario_state["output"] = config.output_dir
