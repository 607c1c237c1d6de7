import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple

from style_extract.constants import (
    BLOCK_TAGS,
    DEFAULT_PATTERNS,
    DEFAULT_VALUES,
    GENERIC_BLOCK_TAG,
    GENERIC_DEFAULTS,
    IMPORTANT_PROP_SET,
    IMPORTANT_PROPS,
    MAX_DEPTH,
    SHORTHAND_MAP,
    TAG_DISPLAY_DEFAULTS,
)
from style_extract.dom import ElementInfo, StyleSource
from style_extract.matcher import matches
from style_extract.rules import PlainRule, RuleSet
from style_extract.sourcemap import SourceMapIndex
from style_extract.values import normalize_value, parse_px

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StyleNode:
    selector: str
    xpath: str
    tag_name: str
    id: str
    classes: Tuple[str, ...]
    styles: Dict[str, str]
    pseudo_elements: Dict[str, Dict[str, str]]
    media_queries: Dict[str, Dict[str, str]]
    hover_styles: Dict[str, str]
    children: Tuple["StyleNode", ...]
    depth: int
    child_count: int = 0

    def walk(self) -> Iterator["StyleNode"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selector": self.selector,
            "xpath": self.xpath,
            "tagName": self.tag_name,
            "id": self.id or None,
            "classes": list(self.classes),
            "styles": dict(self.styles),
            "pseudoElements": {k: dict(v) for k, v in self.pseudo_elements.items()},
            "mediaQueries": {k: dict(v) for k, v in self.media_queries.items()},
            "hoverStyles": dict(self.hover_styles),
            "children": [c.to_dict() for c in self.children],
            "depth": self.depth,
            "childCount": self.child_count,
        }


def selector_for(info: ElementInfo) -> str:
    if info.id:
        return f"#{info.id}"
    if info.classes:
        if info.tag_name == GENERIC_BLOCK_TAG:
            return f".{info.classes[0]}"
        return f"{info.tag_name}.{info.classes[0]}"
    return info.tag_name


def default_display(tag_name: str) -> str:
    if tag_name in TAG_DISPLAY_DEFAULTS:
        return TAG_DISPLAY_DEFAULTS[tag_name]
    return "block" if tag_name in BLOCK_TAGS else "inline"


def is_default_value(prop: str, value: str, tag_name: str = GENERIC_BLOCK_TAG) -> bool:
    value = value.strip()
    if prop == "display":
        # display: none is always kept
        return value != "none" and value == default_display(tag_name)
    if value in DEFAULT_VALUES.get(prop, ()):
        return True
    pattern = DEFAULT_PATTERNS.get(prop)
    if pattern and re.search(pattern, value):
        return True
    return value in GENERIC_DEFAULTS


class StyleTreeBuilder:
    """Walk an element subtree and keep only author-intended declarations.

    ``rules`` and ``index`` are the caches produced by a source-map load. They
    are only read, so a builder can keep using the snapshot it was created
    with while a reload prepares new ones.
    """

    def __init__(
        self,
        source: StyleSource,
        rules: Optional[RuleSet] = None,
        index: Optional[SourceMapIndex] = None,
        max_depth: int = MAX_DEPTH,
    ):
        self.source = source
        self.rules = rules or RuleSet()
        self.index = index or SourceMapIndex()
        self.max_depth = max_depth

    def build(self, root: Any, use_source_map: bool = True) -> StyleNode:
        node = self._build_node(root, 0, use_source_map)
        logger.debug("Built style tree for %s (%d nodes)", node.xpath, sum(1 for _ in node.walk()))
        return node

    def _build_node(self, element: Any, depth: int, use_source_map: bool) -> StyleNode:
        info = self.source.describe(element)
        font_size = parse_px(self.source.get_computed_value(element, "font-size"))

        matched: List[PlainRule] = []
        if use_source_map:
            matched = [r for r in self.rules.rules if matches(self.source, element, r.full_selector)]

        styles: Dict[str, str] = {}
        for prop in self.candidate_properties(matched, use_source_map):
            value = self.source.get_computed_value(element, prop)
            if not value or is_default_value(prop, value, info.tag_name):
                continue
            styles[prop] = normalize_value(prop, value, font_size)

        pseudo_elements: Dict[str, Dict[str, str]] = {}
        media_queries: Dict[str, Dict[str, str]] = {}
        hover_styles: Dict[str, str] = {}
        if use_source_map:
            files = {r.source for r in matched} or set(self.index.entries)
            styles = self.remove_redundant_longhands(styles, files)
            pseudo_elements, media_queries, hover_styles = self.attach_rule_styles(element, font_size)

        children: Tuple[StyleNode, ...] = ()
        if depth < self.max_depth:
            children = tuple(
                self._build_node(child, depth + 1, use_source_map)
                for child in self.source.children(element)
            )

        return StyleNode(
            selector=selector_for(info),
            xpath=self.source.xpath(element),
            tag_name=info.tag_name,
            id=info.id,
            classes=info.classes,
            styles=styles,
            pseudo_elements=pseudo_elements,
            media_queries=media_queries,
            hover_styles=hover_styles,
            children=children,
            depth=depth,
            child_count=info.child_count,
        )

    def candidate_properties(self, matched: List[PlainRule], use_source_map: bool) -> List[str]:
        if not use_source_map:
            return list(IMPORTANT_PROPS)
        wanted: Set[str] = set()
        for rule in matched:
            wanted |= rule.properties
        wanted &= IMPORTANT_PROP_SET
        if not wanted:
            # selector matching under-matches more often than it over-matches
            wanted = set(self.index.all_properties)
        return [p for p in IMPORTANT_PROPS if p in wanted]

    def remove_redundant_longhands(self, styles: Dict[str, str], files: Iterable[str]) -> Dict[str, str]:
        authored_sets: List[FrozenSet[str]] = [self.index.authored_in(f) for f in files]
        drop: Set[str] = set()
        for shorthand, longhands in SHORTHAND_MAP.items():
            if shorthand not in styles:
                continue
            confirmed = any(shorthand in a and not a.intersection(longhands) for a in authored_sets)
            contradicted = any(a.intersection(longhands) for a in authored_sets)
            if confirmed and not contradicted:
                drop.update(longhands)
        return {k: v for k, v in styles.items() if k not in drop}

    def attach_rule_styles(
        self, element: Any, font_size: Optional[float]
    ) -> Tuple[Dict[str, Dict[str, str]], Dict[str, Dict[str, str]], Dict[str, str]]:
        pseudo_elements: Dict[str, Dict[str, str]] = {}
        for rule in self.rules.pseudo_rules:
            if matches(self.source, element, rule.parent_selector):
                pseudo_elements.setdefault(rule.pseudo_element, {}).update(
                    self._normalized(rule.properties, font_size)
                )

        media_queries: Dict[str, Dict[str, str]] = {}
        for rule in self.rules.media_rules:
            if matches(self.source, element, rule.full_selector):
                media_queries.setdefault(rule.mixin_name, {}).update(
                    self._normalized(rule.properties, font_size)
                )

        hover_styles: Dict[str, str] = {}
        for rule in self.rules.hover_rules:
            if matches(self.source, element, rule.parent_selector):
                hover_styles.update(self._normalized(rule.properties, font_size))

        return pseudo_elements, media_queries, hover_styles

    def _normalized(self, props: Dict[str, str], font_size: Optional[float]) -> Dict[str, str]:
        return {name: normalize_value(name, value, font_size) for name, value in props.items()}
