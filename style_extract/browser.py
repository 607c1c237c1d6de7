"""Playwright-backed page adapter.

Stylesheet bodies, maps and sources are fetched with ``page.request`` so they
bypass the page's cross-origin restrictions. Element subtrees are captured in
one ``evaluate`` call as plain JSON and turned into :class:`ElementSnapshot`
trees.
"""

import logging
from typing import Any, List, Optional, Tuple

from playwright.async_api import ElementHandle, Error as PlaywrightError, Page

from style_extract.constants import IMPORTANT_PROPS, MAX_DEPTH, SKIP_TAGS
from style_extract.dom import ElementSnapshot, SnapshotStyleSource
from style_extract.errors import FetchFailure
from style_extract.sourcemap import StylesheetRef

logger = logging.getLogger(__name__)

STYLESHEETS_JS = """() => {
    const sheets = [];
    document.querySelectorAll('link[rel="stylesheet"], style').forEach(el => {
        if (el.tagName.toLowerCase() === 'link') {
            if (el.href) sheets.push({url: el.href, text: null});
        } else {
            sheets.push({url: null, text: el.textContent || ''});
        }
    });
    return {baseUrl: document.baseURI, sheets};
}"""

SNAPSHOT_JS = """(root, {props, maxDepth, skipTags}) => {
    const skip = new Set(skipTags);
    const xpathOf = (el) => {
        const steps = [];
        let node = el;
        while (node && node.nodeType === 1) {
            const tag = node.tagName.toLowerCase();
            let index = 1;
            let sib = node.previousElementSibling;
            while (sib) {
                if (sib.tagName === node.tagName) index += 1;
                sib = sib.previousElementSibling;
            }
            steps.unshift(`${tag}[${index}]`);
            node = node.parentElement;
        }
        return '/' + steps.join('/');
    };
    const describe = (el) => ({
        tag: el.tagName.toLowerCase(),
        id: el.id || '',
        classes: Array.from(el.classList),
        xpath: xpathOf(el),
    });
    const walk = (el, depth) => {
        const computed = window.getComputedStyle(el);
        const values = {};
        props.forEach(p => { values[p] = computed.getPropertyValue(p); });
        const kids = Array.from(el.children).filter(c => !skip.has(c.tagName.toLowerCase()));
        const node = Object.assign(describe(el), {computed: values, childCount: kids.length, children: []});
        if (depth < maxDepth) {
            kids.forEach(c => node.children.push(walk(c, depth + 1)));
        }
        return node;
    };
    const ancestors = [];
    let parent = root.parentElement;
    while (parent) {
        ancestors.push(describe(parent));
        parent = parent.parentElement;
    }
    return {root: walk(root, 0), ancestors};
}"""


def snapshot_from_payload(payload: dict) -> ElementSnapshot:
    """Rebuild a snapshot, linking the captured ancestor chain as parents."""
    parent: Optional[ElementSnapshot] = None
    for data in reversed(payload.get("ancestors") or []):
        parent = ElementSnapshot.from_dict(data, parent=parent)
    root = ElementSnapshot.from_dict(payload["root"], parent=parent)
    return root


class PlaywrightPage:
    def __init__(self, page: Page):
        self.page = page

    async def stylesheets(self) -> List[StylesheetRef]:
        data = await self.page.evaluate(STYLESHEETS_JS)
        base_url = data.get("baseUrl") or self.page.url
        refs = []
        seen = set()
        for sheet in data.get("sheets") or []:
            url = sheet.get("url")
            if url:
                if url in seen:
                    continue
                seen.add(url)
                refs.append(StylesheetRef(url=url, base_url=base_url))
            elif (sheet.get("text") or "").strip():
                refs.append(StylesheetRef(text=sheet["text"], base_url=base_url))
        return refs

    async def fetch_text(self, url: str) -> str:
        try:
            response = await self.page.request.get(url)
            if not response.ok:
                raise FetchFailure(f"HTTP {response.status}", url=url)
            content = await response.body()
        except PlaywrightError as exc:
            raise FetchFailure(str(exc), url=url) from exc
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError:
            return content.decode("latin-1", errors="ignore")

    async def find_element(self, xpath: str) -> Optional[ElementHandle]:
        try:
            return await self.page.query_selector(f"xpath={xpath}")
        except PlaywrightError:
            logger.debug("Invalid xpath %s", xpath)
            return None

    async def xpath_for_selector(self, selector: str) -> Optional[str]:
        handle = await self.page.query_selector(selector)
        if handle is None:
            return None
        payload = await handle.evaluate(SNAPSHOT_JS, {"props": [], "maxDepth": 0, "skipTags": []})
        return payload["root"]["xpath"]

    async def snapshot(
        self,
        xpath: Optional[str] = None,
        element: Any = None,
        max_depth: int = MAX_DEPTH,
    ) -> Optional[Tuple[SnapshotStyleSource, ElementSnapshot]]:
        handle = element if element is not None else await self.find_element(xpath or "")
        if handle is None:
            return None
        payload = await handle.evaluate(
            SNAPSHOT_JS,
            {"props": IMPORTANT_PROPS, "maxDepth": max_depth, "skipTags": sorted(SKIP_TAGS)},
        )
        return SnapshotStyleSource(), snapshot_from_payload(payload)
