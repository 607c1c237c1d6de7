"""Classify stylesheet text into plain, pseudo-element, media-query and hover rules.

This is pattern matching, not a CSS engine: selectors are kept as strings,
only allow-listed declarations survive, and anything that does not scan
cleanly is skipped. A brace-depth scanner is used so the nested syntax written
by :mod:`style_extract.serializer` can be read back; flat CSS scans the same
way a ``selector { declarations }`` regex would.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from style_extract.constants import (
    BREAKPOINT_MIXIN_NAMES,
    FONT_SIZE_MIXIN,
    HOVER_MIXIN,
    IMPORTANT_PROP_SET,
    MEDIA_QUERY_MIXINS,
)

logger = logging.getLogger(__name__)

COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
DROPPED_AT_RULE_RE = re.compile(r"@(?:-[a-z]+-)?(?:keyframes|font-face)\b", re.IGNORECASE)
MEDIA_RE = re.compile(r"@media\b", re.IGNORECASE)
INCLUDE_RE = re.compile(r"@include\s+([\w-]+)", re.IGNORECASE)
FONT_SIZE_INCLUDE_RE = re.compile(
    r"@include\s+" + re.escape(FONT_SIZE_MIXIN) + r"\(\s*(-?[\d.]+)\s*(?:px)?\s*\)", re.IGNORECASE
)
PSEUDO_ELEMENT_RE = re.compile(r"::?(before|after)\b", re.IGNORECASE)
HOVER_RE = re.compile(r":hover\b", re.IGNORECASE)
PSEUDO_RE = re.compile(r"::?[a-zA-Z][\w-]*(?:\([^)]*\))?")
IMPORTANT_RE = re.compile(r"\s*!important\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class PlainRule:
    full_selector: str
    properties: FrozenSet[str]
    source: str = ""


@dataclass(frozen=True)
class PseudoElementRule:
    parent_selector: str
    pseudo_element: str
    properties: Dict[str, str]
    source: str = ""


@dataclass(frozen=True)
class MediaQueryRule:
    full_selector: str
    mixin_name: str
    properties: Dict[str, str]
    source: str = ""


@dataclass(frozen=True)
class HoverRule:
    parent_selector: str
    properties: Dict[str, str]
    source: str = ""


@dataclass(frozen=True)
class RuleSet:
    rules: Tuple[PlainRule, ...] = ()
    pseudo_rules: Tuple[PseudoElementRule, ...] = ()
    media_rules: Tuple[MediaQueryRule, ...] = ()
    hover_rules: Tuple[HoverRule, ...] = ()

    def merge(self, other: "RuleSet") -> "RuleSet":
        return RuleSet(
            rules=self.rules + other.rules,
            pseudo_rules=self.pseudo_rules + other.pseudo_rules,
            media_rules=self.media_rules + other.media_rules,
            hover_rules=self.hover_rules + other.hover_rules,
        )

    def is_empty(self) -> bool:
        return not (self.rules or self.pseudo_rules or self.media_rules or self.hover_rules)


@dataclass
class _Block:
    selectors: List[str]
    kind: str = "rule"
    mixin: Optional[str] = None
    skip: bool = False
    order: int = 0
    statements: List[str] = field(default_factory=list)


def strip_comments(css_text: str) -> str:
    return COMMENT_RE.sub("", css_text or "")


def block_end(text: str, open_index: int) -> int:
    """Index just past the brace closing the block opened at ``open_index``."""
    depth = 0
    quote = None
    escaped = False
    for idx in range(open_index, len(text)):
        ch = text[idx]
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return idx + 1
    return len(text)


def strip_dropped_at_rules(css_text: str) -> str:
    pieces = []
    pos = 0
    while True:
        match = DROPPED_AT_RULE_RE.search(css_text, pos)
        if not match:
            break
        brace = css_text.find("{", match.end())
        if brace == -1:
            break
        pieces.append(css_text[pos:match.start()])
        pos = block_end(css_text, brace)
    pieces.append(css_text[pos:])
    return "".join(pieces)


def normalize_condition(condition: str) -> str:
    return re.sub(r"\s+", "", condition or "").lower()


def media_mixin_for(condition: str) -> Optional[str]:
    normalized = normalize_condition(condition)
    for known, mixin in MEDIA_QUERY_MIXINS:
        if known in normalized:
            return mixin
    return None


def extract_media_blocks(css_text: str) -> Tuple[str, List[Tuple[str, str]]]:
    """Pull ``@media`` blocks out of ``css_text``.

    Returns the remaining text and ``(mixin_name, body)`` pairs for blocks whose
    condition maps to a breakpoint mixin. Blocks with unknown conditions are
    removed as well, they just produce no pair.
    """
    found: List[Tuple[int, int, Optional[str], str]] = []
    pos = 0
    while True:
        match = MEDIA_RE.search(css_text, pos)
        if not match:
            break
        brace = css_text.find("{", match.end())
        if brace == -1:
            break
        end = block_end(css_text, brace)
        condition = css_text[match.end():brace]
        body = css_text[brace + 1:end - 1] if css_text[end - 1:end] == "}" else css_text[brace + 1:end]
        found.append((match.start(), end, media_mixin_for(condition), body))
        pos = end

    remaining = css_text
    for start, end, _, _ in reversed(found):
        remaining = remaining[:start] + remaining[end:]

    blocks = [(mixin, body) for _, _, mixin, body in found if mixin]
    dropped = len(found) - len(blocks)
    if dropped:
        logger.debug("Dropped %d @media block(s) with unrecognized conditions", dropped)
    return remaining, blocks


def _join_selectors(parents: List[str], header: str) -> List[str]:
    selectors = [" ".join(s.split()) for s in header.split(",") if s.strip()]
    if not parents:
        return selectors
    joined = []
    for parent in parents:
        for selector in selectors:
            if "&" in selector:
                joined.append(selector.replace("&", parent))
            else:
                joined.append(f"{parent} {selector}")
    return joined


def _open_block(header: str, parent: Optional[_Block], order: int) -> _Block:
    parents = parent.selectors if parent else []
    inherited_mixin = parent.mixin if parent else None
    if parent and parent.skip:
        return _Block(selectors=[], skip=True, order=order)

    lowered = header.lower()
    if lowered.startswith("@include"):
        match = INCLUDE_RE.match(header)
        name = match.group(1).lower() if match else ""
        if name == HOVER_MIXIN:
            return _Block(selectors=list(parents), kind="hover", mixin=inherited_mixin, order=order)
        if name in BREAKPOINT_MIXIN_NAMES:
            return _Block(selectors=list(parents), mixin=name, order=order)
        return _Block(selectors=[], skip=True, order=order)
    if lowered.startswith("@media"):
        mixin = media_mixin_for(header[len("@media"):])
        if mixin is None:
            return _Block(selectors=[], skip=True, order=order)
        return _Block(selectors=list(parents), mixin=mixin, order=order)
    if lowered.startswith("@"):
        return _Block(selectors=list(parents), mixin=inherited_mixin, order=order)
    return _Block(selectors=_join_selectors(parents, header), mixin=inherited_mixin, order=order)


def scan_blocks(css_text: str, mixin: Optional[str] = None) -> List[_Block]:
    done: List[_Block] = []
    stack: List[_Block] = []
    root = _Block(selectors=[], mixin=mixin) if mixin else None
    buf: List[str] = []
    paren = 0
    quote = None
    escaped = False
    order = 0

    for ch in css_text:
        if quote:
            buf.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
        elif ch == "(":
            paren += 1
        elif ch == ")":
            paren = max(0, paren - 1)
        elif ch == "{":
            header = "".join(buf).strip()
            buf = []
            stack.append(_open_block(header, stack[-1] if stack else root, order))
            order += 1
            continue
        elif ch == ";" and paren == 0:
            statement = "".join(buf).strip()
            buf = []
            if stack and statement:
                stack[-1].statements.append(statement)
            continue
        elif ch == "}":
            statement = "".join(buf).strip()
            buf = []
            paren = 0
            if stack:
                if statement:
                    stack[-1].statements.append(statement)
                done.append(stack.pop())
            continue
        buf.append(ch)

    done.sort(key=lambda b: b.order)
    return done


def parse_declarations(statements: List[str]) -> Dict[str, str]:
    props: Dict[str, str] = {}
    for statement in statements:
        font_size = FONT_SIZE_INCLUDE_RE.match(statement)
        if font_size:
            props["font-size"] = f"{font_size.group(1)}px"
            continue
        if ":" not in statement or statement.startswith(("@", "$", "&")):
            continue
        name, value = statement.split(":", 1)
        name = name.strip().lower()
        value = IMPORTANT_RE.sub("", " ".join(value.split()))
        if name in IMPORTANT_PROP_SET and value:
            props[name] = value
    return props


def clean_selector(selector: str) -> str:
    return " ".join(PSEUDO_RE.sub("", selector).split())


def is_noise_selector(selector: str) -> bool:
    if not selector or selector == "*":
        return True
    if selector.startswith(("@", "[")):
        return True
    return "." not in selector and "#" not in selector


def _classify(block: _Block, props: Dict[str, str], source: str, out: Dict[str, list]) -> None:
    for selector in block.selectors:
        pseudo = PSEUDO_ELEMENT_RE.search(selector)
        hover = HOVER_RE.search(selector)
        cleaned = clean_selector(selector)
        if is_noise_selector(cleaned):
            continue

        if block.mixin:
            if pseudo or hover or block.kind == "hover":
                continue
            out["media"].append(MediaQueryRule(cleaned, block.mixin, dict(props), source))
        elif pseudo:
            pseudo_element = "::" + pseudo.group(1).lower()
            out["pseudo"].append(PseudoElementRule(cleaned, pseudo_element, dict(props), source))
        elif hover or block.kind == "hover":
            out["hover"].append(HoverRule(cleaned, dict(props), source))
        else:
            out["plain"].append(PlainRule(cleaned, frozenset(props), source))


def _collect(blocks: List[_Block], source: str, out: Dict[str, list]) -> None:
    for block in blocks:
        if block.skip or not block.selectors:
            continue
        props = parse_declarations(block.statements)
        if not props:
            continue
        _classify(block, props, source, out)


def parse_css(css_text: str, source: str = "") -> RuleSet:
    """Parse stylesheet text into a :class:`RuleSet`.

    ``source`` names the CSS file the text came from and is stamped on every
    rule so later stages can consult that file's authored properties.
    """
    text = strip_dropped_at_rules(strip_comments(css_text))
    remaining, media_blocks = extract_media_blocks(text)

    out: Dict[str, list] = {"plain": [], "pseudo": [], "media": [], "hover": []}
    for mixin, body in media_blocks:
        _collect(scan_blocks(body, mixin=mixin), source, out)
    _collect(scan_blocks(remaining), source, out)

    return RuleSet(
        rules=tuple(out["plain"]),
        pseudo_rules=tuple(out["pseudo"]),
        media_rules=tuple(out["media"]),
        hover_rules=tuple(out["hover"]),
    )
