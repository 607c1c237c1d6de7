"""Per-page inspection state and the command surface the host talks to."""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Tuple

from style_extract.config import ExtractorConfig
from style_extract.constants import MAX_DEPTH
from style_extract.dom import StyleSource
from style_extract.errors import ElementNotFound, UnknownCommand
from style_extract.rules import RuleSet
from style_extract.serializer import serialize
from style_extract.sourcemap import SourceMapIndex, SourceMapResolver, StylesheetRef, parse_rules
from style_extract.tree import StyleNode, StyleTreeBuilder

logger = logging.getLogger(__name__)


class PageAdapter(Protocol):
    async def stylesheets(self) -> List[StylesheetRef]: ...

    async def fetch_text(self, url: str) -> str: ...

    async def snapshot(
        self, xpath: Optional[str] = None, element: Any = None, max_depth: int = MAX_DEPTH
    ) -> Optional[Tuple[StyleSource, Any]]: ...


@dataclass(frozen=True)
class StyleCaches:
    rules: RuleSet = field(default_factory=RuleSet)
    index: SourceMapIndex = field(default_factory=SourceMapIndex)


class InspectionSession:
    """Owns the rule caches for one attached page.

    Caches are replaced as a single object, never mutated in place. A tree
    build reads the caches once when it starts and finishes against that
    snapshot even if a reload lands meanwhile.
    """

    def __init__(self, page: PageAdapter, config: Optional[ExtractorConfig] = None):
        self.page = page
        self.config = config or ExtractorConfig()
        self.caches = StyleCaches()
        self.last_tree: Optional[StyleNode] = None
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]] = {
            "loadSourceMaps": self._handle_load,
            "clearSourceMaps": self._handle_clear,
            "getSourceMapStatus": self._handle_status,
            "buildStyleTree": self._handle_build,
            "serializeStyleTree": self._handle_serialize,
        }

    async def handle(self, command: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        handler = self._handlers.get(command)
        try:
            if handler is None:
                raise UnknownCommand(command)
            return await handler(payload or {})
        except (ElementNotFound, UnknownCommand) as exc:
            logger.info("%s: %s", command, exc)
            return {"status": "error", "error": str(exc)}

    async def load_source_maps(self) -> StyleCaches:
        stylesheets = await self.page.stylesheets()
        logger.debug("Found %d stylesheet(s) on page", len(stylesheets))
        index = await SourceMapResolver(self.page.fetch_text).resolve(stylesheets)
        caches = StyleCaches(rules=parse_rules(index), index=index)
        self.caches = caches
        self.last_tree = None
        return caches

    def clear(self) -> None:
        self.caches = StyleCaches()
        self.last_tree = None

    async def build_style_tree(
        self,
        xpath: Optional[str] = None,
        element: Any = None,
        use_source_map: Optional[bool] = None,
    ) -> StyleNode:
        caches = self.caches
        found = await self.page.snapshot(xpath=xpath, element=element, max_depth=self.config.max_depth)
        if found is None:
            raise ElementNotFound()
        source, root = found
        if use_source_map is None:
            use_source_map = self.config.use_source_map and caches.index.has_source_map
        builder = StyleTreeBuilder(source, caches.rules, caches.index, max_depth=self.config.max_depth)
        tree = builder.build(root, use_source_map=use_source_map)
        self.last_tree = tree
        return tree

    async def _handle_load(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            caches = await self.load_source_maps()
        except Exception as exc:
            logger.exception("Loading source maps failed")
            return {"status": "error", "error": str(exc)}
        props = sorted(caches.index.all_properties)
        return {"status": "ok", "propertyCount": len(props), "properties": props}

    async def _handle_clear(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.clear()
        return {"status": "ok"}

    async def _handle_status(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.caches.index.status()

    async def _handle_build(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        xpath = payload.get("xpath")
        element = payload.get("element")
        if not xpath and element is None:
            raise ElementNotFound()
        tree = await self.build_style_tree(
            xpath=xpath,
            element=element,
            use_source_map=payload.get("useSourceMap"),
        )
        return {"status": "ok", "data": tree.to_dict()}

    async def _handle_serialize(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if self.last_tree is None:
            return {"status": "error", "error": "No style tree has been built"}
        options = self.config.serialize_options(payload)
        return {"status": "ok", "text": serialize(self.last_tree, options)}
