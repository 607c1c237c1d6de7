"""Recover the properties a stylesheet's author actually wrote.

Each stylesheet that ends with a ``sourceMappingURL`` comment is followed to
its map and from there to the main preprocessor source, whose indented
``name: value`` lines give the authored property names. Stylesheets without a
map are ignored completely: they cannot be told apart from third-party CSS.
"""

import base64
import json
import logging
import posixpath
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, FrozenSet, Iterable, List, Optional, Set
from urllib.parse import unquote, urljoin, urlparse

from style_extract.constants import (
    DEPENDENCY_DIRS,
    IMPORTANT_PROP_SET,
    SCSS_CONTROL_KEYWORDS,
    SCSS_EXTENSIONS,
)
from style_extract.errors import FetchFailure, ParseFailure
from style_extract.rules import RuleSet, parse_css

logger = logging.getLogger(__name__)

FetchText = Callable[[str], Awaitable[str]]

SOURCE_MAPPING_URL_RE = re.compile(r"[#@]\s*sourceMappingURL\s*=\s*([^\s*'\"]+)")
DECLARATION_LINE_RE = re.compile(r"^(?: {2,}|\t+)([$@%]?[A-Za-z_-][\w-]*)\s*:\s*(.*)$")


@dataclass(frozen=True)
class StylesheetRef:
    url: Optional[str] = None
    text: Optional[str] = None
    base_url: str = ""


@dataclass(frozen=True)
class SourceMapFileEntry:
    css_file_name: str
    authored_properties: FrozenSet[str]
    css_text: str = ""
    map_url: str = ""


@dataclass
class SourceMapIndex:
    entries: Dict[str, SourceMapFileEntry] = field(default_factory=dict)
    notes: List[str] = field(default_factory=list)

    def add(self, entry: SourceMapFileEntry) -> None:
        existing = self.entries.get(entry.css_file_name)
        if existing is None:
            self.entries[entry.css_file_name] = entry
            return
        self.entries[entry.css_file_name] = SourceMapFileEntry(
            css_file_name=entry.css_file_name,
            authored_properties=existing.authored_properties | entry.authored_properties,
            css_text=existing.css_text + "\n" + entry.css_text,
            map_url=existing.map_url,
        )

    @property
    def has_source_map(self) -> bool:
        return bool(self.entries)

    @property
    def all_properties(self) -> FrozenSet[str]:
        props: Set[str] = set()
        for entry in self.entries.values():
            props |= entry.authored_properties
        return frozenset(props)

    def authored_in(self, css_file_name: str) -> FrozenSet[str]:
        entry = self.entries.get(css_file_name)
        return entry.authored_properties if entry else frozenset()

    def status(self) -> Dict[str, Any]:
        props = sorted(self.all_properties)
        return {
            "hasSourceMap": self.has_source_map,
            "propertyCount": len(props),
            "properties": props,
            "byFile": {
                name: {
                    "count": len(entry.authored_properties),
                    "properties": sorted(entry.authored_properties),
                }
                for name, entry in self.entries.items()
            },
        }


def find_source_mapping_url(css_text: str) -> Optional[str]:
    found = SOURCE_MAPPING_URL_RE.findall(css_text or "")
    return found[-1] if found else None


def file_name_of(url: str) -> str:
    path = urlparse(url).path if "://" in url else url.split("?", 1)[0]
    return posixpath.basename(path.rstrip("/"))


def main_source_names(css_file_name: str) -> Set[str]:
    stem = css_file_name
    if stem.lower().endswith(".css"):
        stem = stem[:-4]
    if stem.lower().endswith(".min"):
        stem = stem[:-4]
    return {stem + ext for ext in SCSS_EXTENSIONS}


def is_main_source(path: str, main_names: Set[str]) -> bool:
    name = file_name_of(path)
    if name.startswith("_"):
        return False
    return name in main_names


def extract_authored_properties(source_text: str) -> FrozenSet[str]:
    """Allow-listed property names declared on indented lines of a SCSS/Sass body."""
    props: Set[str] = set()
    for line in (source_text or "").splitlines():
        match = DECLARATION_LINE_RE.match(line)
        if not match:
            continue
        name = match.group(1)
        if name[0] in "$@%" or name.lower() in SCSS_CONTROL_KEYWORDS:
            continue
        if match.group(2).rstrip().endswith("{"):
            continue
        name = name.lower()
        if name in IMPORTANT_PROP_SET:
            props.add(name)
    return frozenset(props)


def decode_data_uri(uri: str) -> str:
    header, _, payload = uri.partition(",")
    if header.lower().endswith(";base64"):
        try:
            return base64.b64decode(payload).decode("utf-8")
        except (ValueError, UnicodeDecodeError) as exc:
            raise ParseFailure(f"Invalid base64 source map: {exc}") from exc
    return unquote(payload)


class SourceMapResolver:
    def __init__(self, fetch_text: FetchText):
        self.fetch_text = fetch_text

    async def resolve(self, stylesheets: Iterable[StylesheetRef]) -> SourceMapIndex:
        index = SourceMapIndex()
        for sheet in stylesheets:
            entry = await self.resolve_stylesheet(sheet, index.notes)
            if entry is not None:
                index.add(entry)
        logger.info(
            "Resolved %d mapped stylesheet(s), %d authored properties",
            len(index.entries),
            len(index.all_properties),
        )
        return index

    async def resolve_stylesheet(self, sheet: StylesheetRef, notes: List[str]) -> Optional[SourceMapFileEntry]:
        label = sheet.url or "inline <style>"
        if sheet.url:
            try:
                css_text = await self.fetch_text(sheet.url)
            except FetchFailure as exc:
                self._note(notes, f"Failed to fetch stylesheet {label}: {exc}")
                return None
        else:
            css_text = sheet.text or ""

        map_ref = find_source_mapping_url(css_text)
        if not map_ref:
            logger.debug("No sourceMappingURL in %s, skipping", label)
            return None

        base_url = sheet.url or sheet.base_url
        map_url = map_ref if map_ref.startswith("data:") else urljoin(base_url, map_ref)
        css_file_name = file_name_of(sheet.url) if sheet.url else ""

        try:
            source_map = await self.load_map(map_url)
        except (FetchFailure, ParseFailure) as exc:
            self._note(notes, f"Failed to load source map for {label}: {exc}")
            name = css_file_name or self._inline_name(map_url, {})
            return SourceMapFileEntry(name, frozenset(), css_text, map_url)

        if not css_file_name:
            css_file_name = self._inline_name(map_url, source_map)
        source_base = base_url if map_url.startswith("data:") else map_url
        props = await self.authored_properties(source_map, source_base, css_file_name, notes)
        logger.debug("%s: %d authored properties", css_file_name, len(props))
        return SourceMapFileEntry(css_file_name, props, css_text, map_url)

    async def load_map(self, map_url: str) -> Dict[str, Any]:
        if map_url.startswith("data:"):
            raw = decode_data_uri(map_url)
        else:
            raw = await self.fetch_text(map_url)
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise ParseFailure(f"Malformed source map JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ParseFailure("Source map is not a JSON object")
        return data

    async def authored_properties(
        self,
        source_map: Dict[str, Any],
        source_base: str,
        css_file_name: str,
        notes: List[str],
    ) -> FrozenSet[str]:
        sources = [s for s in source_map.get("sources") or [] if isinstance(s, str)]
        contents = source_map.get("sourcesContent")
        main_names = main_source_names(css_file_name)
        props: Set[str] = set()

        if isinstance(contents, list) and any(isinstance(c, str) for c in contents):
            for path, content in zip(sources, contents):
                if isinstance(content, str) and is_main_source(path, main_names):
                    props |= extract_authored_properties(content)
            return frozenset(props)

        source_root = source_map.get("sourceRoot") or ""
        for path in sources:
            if not self.should_fetch(path, main_names):
                continue
            if source_root:
                path = source_root.rstrip("/") + "/" + path
            url = urljoin(source_base, path)
            try:
                props |= extract_authored_properties(await self.fetch_text(url))
            except FetchFailure as exc:
                self._note(notes, f"Failed to fetch source {url}: {exc}")
        return frozenset(props)

    def should_fetch(self, path: str, main_names: Set[str]) -> bool:
        lowered = path.lower()
        if lowered.split("?", 1)[0].endswith(".css"):
            return False
        if any(d in lowered for d in DEPENDENCY_DIRS):
            return False
        return is_main_source(path, main_names)

    def _inline_name(self, map_url: str, source_map: Dict[str, Any]) -> str:
        name = source_map.get("file")
        if isinstance(name, str) and name:
            return file_name_of(name)
        if map_url.startswith("data:"):
            return "inline.css"
        name = file_name_of(map_url)
        return name[:-4] if name.endswith(".map") else name

    def _note(self, notes: List[str], message: str) -> None:
        logger.warning(message)
        notes.append(message)


def parse_rules(index: SourceMapIndex) -> RuleSet:
    rules = RuleSet()
    for name, entry in index.entries.items():
        rules = rules.merge(parse_css(entry.css_text, source=name))
    return rules
