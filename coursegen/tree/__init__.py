"""Course content tree: typed nodes, resource filters and the metadata loader."""

from .filters import ResourceFilter, ResourceFilters
from .loader import load_course, parse_step_document
from .models import (
    Course,
    CourseInfo,
    Location,
    MapFragment,
    Module,
    Step,
    Theme,
    step_sort_key,
)

__all__ = [
    "Course",
    "CourseInfo",
    "Location",
    "MapFragment",
    "Module",
    "ResourceFilter",
    "ResourceFilters",
    "Step",
    "Theme",
    "load_course",
    "parse_step_document",
    "step_sort_key",
]
