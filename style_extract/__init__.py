"""Reconstruct authored SCSS for elements of a live page from source maps and computed styles."""

from style_extract.config import ExtractorConfig
from style_extract.dom import ElementSnapshot, SnapshotStyleSource
from style_extract.errors import ElementNotFound, FetchFailure, ParseFailure, UnknownCommand
from style_extract.matcher import matches
from style_extract.rules import HoverRule, MediaQueryRule, PlainRule, PseudoElementRule, RuleSet, parse_css
from style_extract.serializer import SerializeOptions, serialize
from style_extract.session import InspectionSession
from style_extract.sourcemap import SourceMapIndex, SourceMapResolver, StylesheetRef, parse_rules
from style_extract.tree import StyleNode, StyleTreeBuilder

__version__ = "0.1.0"

__all__ = [
    "ElementNotFound",
    "ElementSnapshot",
    "ExtractorConfig",
    "FetchFailure",
    "HoverRule",
    "InspectionSession",
    "MediaQueryRule",
    "ParseFailure",
    "PlainRule",
    "PseudoElementRule",
    "RuleSet",
    "SerializeOptions",
    "SnapshotStyleSource",
    "SourceMapIndex",
    "SourceMapResolver",
    "StyleNode",
    "StyleTreeBuilder",
    "StylesheetRef",
    "UnknownCommand",
    "matches",
    "parse_css",
    "parse_rules",
    "serialize",
]
