"""Element access used by the matcher and tree builder.

The engine never touches a live DOM directly. It goes through a
:class:`StyleSource`, and the concrete source used everywhere is
:class:`SnapshotStyleSource`, which reads :class:`ElementSnapshot` trees. The
Playwright adapter produces those snapshots from a page in a single
``evaluate`` round trip; tests build them by hand.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

SIMPLE_TAG_RE = re.compile(r"^([a-zA-Z][\w-]*|\*)")
SIMPLE_ID_RE = re.compile(r"#([\w-]+)")
SIMPLE_CLASS_RE = re.compile(r"\.([\w-]+)")
ATTRIBUTE_RE = re.compile(r"\[[^\]]*\]")
XPATH_STEP_RE = re.compile(r"/([\w-]+)(?:\[(\d+)\])?")


@dataclass(frozen=True)
class SimpleSelector:
    tag: Optional[str] = None
    id: Optional[str] = None
    classes: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, part: str) -> "SimpleSelector":
        part = ATTRIBUTE_RE.sub("", part.strip())
        part = re.sub(r"::?[a-zA-Z][\w-]*(?:\([^)]*\))?", "", part)
        tag_match = SIMPLE_TAG_RE.match(part)
        tag = tag_match.group(1).lower() if tag_match else None
        if tag == "*":
            tag = None
        id_match = SIMPLE_ID_RE.search(part)
        return cls(
            tag=tag,
            id=id_match.group(1) if id_match else None,
            classes=tuple(SIMPLE_CLASS_RE.findall(part)),
        )


@dataclass(frozen=True)
class ElementInfo:
    tag_name: str
    id: str
    classes: Tuple[str, ...]
    child_count: int


class StyleSource(Protocol):
    def get_computed_value(self, element: Any, prop: str) -> str: ...

    def children(self, element: Any) -> Sequence[Any]: ...

    def parent(self, element: Any) -> Optional[Any]: ...

    def matches(self, element: Any, part: SimpleSelector) -> bool: ...

    def describe(self, element: Any) -> ElementInfo: ...

    def xpath(self, element: Any) -> str: ...


@dataclass(eq=False)
class ElementSnapshot:
    tag: str
    id: str = ""
    classes: List[str] = field(default_factory=list)
    computed: Dict[str, str] = field(default_factory=dict)
    children: List["ElementSnapshot"] = field(default_factory=list)
    child_count: Optional[int] = None
    xpath: str = ""
    parent: Optional["ElementSnapshot"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.tag = self.tag.lower()
        for child in self.children:
            child.parent = self

    @classmethod
    def from_dict(cls, data: Dict[str, Any], parent: Optional["ElementSnapshot"] = None) -> "ElementSnapshot":
        node = cls(
            tag=data.get("tag") or "",
            id=data.get("id") or "",
            classes=list(data.get("classes") or []),
            computed=dict(data.get("computed") or {}),
            child_count=data.get("childCount"),
            xpath=data.get("xpath") or "",
            parent=parent,
        )
        for child in data.get("children") or []:
            node.children.append(cls.from_dict(child, parent=node))
        return node


def xpath_of(element: ElementSnapshot) -> str:
    if element.xpath:
        return element.xpath
    steps = []
    node: Optional[ElementSnapshot] = element
    while node is not None:
        index = 1
        if node.parent is not None:
            same_tag = [c for c in node.parent.children if c.tag == node.tag]
            index = next(i for i, c in enumerate(same_tag, start=1) if c is node)
        steps.append(f"{node.tag}[{index}]")
        node = node.parent
    return "/" + "/".join(reversed(steps))


def find_by_xpath(document: ElementSnapshot, xpath: str) -> Optional[ElementSnapshot]:
    steps = XPATH_STEP_RE.findall(xpath or "")
    if not steps:
        return None
    tag, index = steps[0]
    if tag.lower() != document.tag or int(index or 1) != 1:
        return None
    node = document
    for tag, index in steps[1:]:
        same_tag = [c for c in node.children if c.tag == tag.lower()]
        position = int(index or 1)
        if position < 1 or position > len(same_tag):
            return None
        node = same_tag[position - 1]
    return node


class SnapshotStyleSource:
    def get_computed_value(self, element: ElementSnapshot, prop: str) -> str:
        return (element.computed.get(prop) or "").strip()

    def children(self, element: ElementSnapshot) -> Sequence[ElementSnapshot]:
        return element.children

    def parent(self, element: ElementSnapshot) -> Optional[ElementSnapshot]:
        return element.parent

    def matches(self, element: ElementSnapshot, part: SimpleSelector) -> bool:
        if part.tag and element.tag != part.tag:
            return False
        if part.id and element.id != part.id:
            return False
        return all(c in element.classes for c in part.classes)

    def describe(self, element: ElementSnapshot) -> ElementInfo:
        child_count = element.child_count
        if child_count is None:
            child_count = len(element.children)
        return ElementInfo(
            tag_name=element.tag,
            id=element.id,
            classes=tuple(element.classes),
            child_count=child_count,
        )

    def xpath(self, element: ElementSnapshot) -> str:
        return xpath_of(element)
