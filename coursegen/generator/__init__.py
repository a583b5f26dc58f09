"""Two-pass course generation: symbol tables, navigation, resolution and pages."""

from .context import PageWriter, SiteContext
from .formatter import HtmlFormatter
from .glossary import GlossaryPageEmitter
from .media import MediaGarbageCollector, MediaRegistry, MediaReport
from .navigation import NavigationBuilder, NavigationFragments
from .page_generator import PageGenerator
from .references import ReferenceTable
from .renderer import TemplateRenderer
from .resolver import ReferenceResolver
from .symbols import SymbolTableBuilder, SymbolTables

__all__ = [
    "GlossaryPageEmitter",
    "HtmlFormatter",
    "MediaGarbageCollector",
    "MediaRegistry",
    "MediaReport",
    "NavigationBuilder",
    "NavigationFragments",
    "PageGenerator",
    "PageWriter",
    "ReferenceResolver",
    "ReferenceTable",
    "SiteContext",
    "SymbolTableBuilder",
    "SymbolTables",
    "TemplateRenderer",
]
