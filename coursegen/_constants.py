"""Common literal values used across coursegen.

These constants keep filenames, bucket names and default paths centralized so
templates, generators, and tests can import the same values without drifting.
Intended for internal use within the coursegen package.

Examples
--------
>>> from coursegen import _constants
>>> _constants.GLOSSARY_BUCKETS[:3]
('symb', 'digit', 'a')
>>> _constants.BUILD_META_FILENAME
'.coursegen-build.json'
"""

import string

BUILD_META_FILENAME = ".coursegen-build.json"
METADATA_FILENAME = "metadata.yaml"
DEFAULT_MEDIA_DIR = "media"
GLOSSARY_DIR = "glossary"
REFERENCES_PAGE = "references.html"
OUTJECTIVES_PAGE = "outjectives.html"
OUTJECTIVES_SOURCE = "<outjectives>"
OUTJECTIVES_MENU_TITLE = "Outcomes and objectives"

GLOSSARY_SYMBOL_BUCKET = "symb"
GLOSSARY_DIGIT_BUCKET = "digit"
GLOSSARY_BUCKETS: tuple[str, ...] = (
    GLOSSARY_SYMBOL_BUCKET,
    GLOSSARY_DIGIT_BUCKET,
    *string.ascii_lowercase,
)
GLOSSARY_BUCKET_LABELS: dict[str, str] = {
    GLOSSARY_SYMBOL_BUCKET: "@",
    GLOSSARY_DIGIT_BUCKET: "0-9",
}

AUTO_ANCHOR_PREFIX = "AUTO-"
MIN_STEP_WIDTH = 2

DEFAULT_TIDY_COMMAND = "/usr/bin/tidyp"
DEFAULT_TIDY_ARGS: tuple[str, ...] = (
    "-i",
    "-w",
    "0",
    "-b",
    "-q",
    "-c",
    "-asxhtml",
    "--join-classes",
    "no",
    "--join-styles",
    "no",
    "--merge-divs",
    "no",
    "--merge-spans",
    "no",
)
