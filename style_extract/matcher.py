import re
from functools import lru_cache
from typing import Any, Tuple

from style_extract.dom import SimpleSelector, StyleSource

COMBINATOR_SPLIT_RE = re.compile(r"\s*>\s*|\s+")


@lru_cache(maxsize=4096)
def selector_parts(selector: str) -> Tuple[SimpleSelector, ...]:
    # Sibling combinators are dropped, so "a + b" is read as "a b".
    tokens = [t for t in COMBINATOR_SPLIT_RE.split(selector.strip()) if t and t not in {"+", "~"}]
    return tuple(SimpleSelector.parse(t) for t in tokens)


def matches(source: StyleSource, element: Any, selector: str) -> bool:
    """Approximate test of ``element`` against a compound selector.

    Child and descendant combinators are treated alike: each remaining part
    must be satisfied by some ancestor, nearest first, and ancestors that do
    not satisfy the pending part are skipped.
    """
    parts = selector_parts(selector)
    if not parts:
        return False
    if not source.matches(element, parts[-1]):
        return False

    pending = len(parts) - 2
    ancestor = source.parent(element)
    while pending >= 0 and ancestor is not None:
        if source.matches(ancestor, parts[pending]):
            pending -= 1
        ancestor = source.parent(ancestor)
    return pending < 0
