from __future__ import annotations

from typing import Dict, Iterable, List, Optional

import pytest

from style_extract.dom import ElementSnapshot, SnapshotStyleSource, find_by_xpath
from style_extract.errors import FetchFailure
from style_extract.sourcemap import StylesheetRef


def make_element(
    tag: str,
    id: str = "",
    classes: Iterable[str] = (),
    computed: Optional[Dict[str, str]] = None,
    children: Iterable[ElementSnapshot] = (),
) -> ElementSnapshot:
    return ElementSnapshot(
        tag=tag,
        id=id,
        classes=list(classes),
        computed=dict(computed or {}),
        children=list(children),
    )


class FakePage:
    """In-memory stand-in for the Playwright page adapter."""

    def __init__(
        self,
        resources: Optional[Dict[str, str]] = None,
        stylesheets: Optional[List[StylesheetRef]] = None,
        document: Optional[ElementSnapshot] = None,
    ):
        self.resources = resources or {}
        self._stylesheets = stylesheets or []
        self.document = document
        self.fetched: List[str] = []

    async def stylesheets(self) -> List[StylesheetRef]:
        return list(self._stylesheets)

    async def fetch_text(self, url: str) -> str:
        self.fetched.append(url)
        if url not in self.resources:
            raise FetchFailure("HTTP 404", url=url)
        return self.resources[url]

    async def snapshot(self, xpath=None, element=None, max_depth=5):
        if element is not None:
            return SnapshotStyleSource(), element
        node = find_by_xpath(self.document, xpath) if self.document is not None else None
        if node is None:
            return None
        return SnapshotStyleSource(), node


@pytest.fixture
def el():
    return make_element


@pytest.fixture
def source():
    return SnapshotStyleSource()


@pytest.fixture
def fake_page():
    return FakePage
