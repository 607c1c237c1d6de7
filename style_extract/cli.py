#!/usr/bin/env python3
"""
Element style extraction - command line host.
Opens a page with Playwright, loads its source maps and writes the
reconstructed SCSS for one element.
"""

import argparse
import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from playwright.async_api import async_playwright

from style_extract.browser import PlaywrightPage
from style_extract.config import ExtractorConfig
from style_extract.session import InspectionSession


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def safe_filename(value: str) -> str:
    return re.sub(r"[^\w\-]", "_", value).strip("_") or "element"


def write_text(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")


def write_json(path: Path, data: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def config_from_args(args: argparse.Namespace) -> ExtractorConfig:
    return ExtractorConfig(
        max_depth=args.max_depth,
        use_source_map=not args.no_source_map,
        emit_media_query_mixins=not args.no_media_mixins,
        emit_hover_mixin=not args.no_hover_mixin,
        emit_font_size_mixin=not args.no_font_size_mixin,
        viewport_width=args.width,
        viewport_height=args.height,
    )


class StyleExtractor:
    def __init__(self, url: str, output_dir: str, config: ExtractorConfig):
        self.url = url
        self.output_dir = Path(output_dir)
        self.config = config
        self.limits: List[str] = []
        ensure_dir(self.output_dir)

    async def run(self, selector: Optional[str] = None, xpath: Optional[str] = None) -> Dict[str, Any]:
        stage = "init"
        summary: Dict[str, Any] = {"url": self.url}
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=True)
            context = await browser.new_context(viewport=self.config.viewport, device_scale_factor=1)
            page = await context.new_page()
            adapter = PlaywrightPage(page)
            session = InspectionSession(adapter, self.config)
            try:
                stage = "goto"
                await page.goto(self.url, wait_until="domcontentloaded", timeout=self.config.navigation_timeout_ms)
                try:
                    stage = "wait_networkidle"
                    await page.wait_for_load_state("networkidle", timeout=15000)
                except Exception:
                    self.limits.append("Page did not reach network idle; continuing")
                await page.wait_for_timeout(self.config.settle_ms)

                stage = "load_source_maps"
                loaded = await session.handle("loadSourceMaps")
                status = await session.handle("getSourceMapStatus")
                write_json(self.output_dir / "source-maps.json", status)
                self.limits.extend(session.caches.index.notes)
                summary["source_maps"] = loaded

                stage = "resolve_element"
                if selector and not xpath:
                    xpath = await adapter.xpath_for_selector(selector)
                built = await session.handle("buildStyleTree", {"xpath": xpath} if xpath else {})
                summary["build"] = {k: v for k, v in built.items() if k != "data"}
                if built.get("status") != "ok":
                    return summary

                stage = "write_outputs"
                name = safe_filename(built["data"]["selector"])
                write_json(self.output_dir / f"{name}.json", built["data"])
                exported = await session.handle("serializeStyleTree")
                scss_path = self.output_dir / f"{name}.scss"
                write_text(scss_path, exported["text"])
                summary["scss"] = str(scss_path)
            except Exception as exc:
                self.limits.append(f"Failed at {stage}: {exc}")
                summary["error"] = str(exc)
                summary["stage"] = stage
            finally:
                summary["limits"] = self.limits
                session.clear()
                await context.close()
                await browser.close()
        return summary


async def main_async(args: argparse.Namespace) -> Dict[str, Any]:
    extractor = StyleExtractor(url=args.url, output_dir=args.output, config=config_from_args(args))
    summary = await extractor.run(selector=args.selector, xpath=args.xpath)
    if summary.get("scss"):
        print("\n✅ Extraction complete")
        print(f"SCSS: {summary['scss']}")
    else:
        print("\n❌ Extraction failed")
        print(summary.get("error") or summary.get("build", {}).get("error", "unknown error"))
    for limit in summary.get("limits", []):
        print(f"  - {limit}")
    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Reconstruct authored SCSS for an element of a live page")
    parser.add_argument("url", help="Page URL")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--selector", "-s", help="CSS selector of the element to inspect (first match)")
    target.add_argument("--xpath", "-x", help="Absolute xpath of the element to inspect")
    parser.add_argument("--output", "-o", default="./style-extract-output", help="Output directory")
    parser.add_argument("--max-depth", type=int, default=ExtractorConfig.max_depth, help="Descendant depth limit")
    parser.add_argument("--no-source-map", action="store_true", help="Use all computed properties instead of source maps")
    parser.add_argument("--no-media-mixins", action="store_true", help="Do not emit breakpoint @include blocks")
    parser.add_argument("--no-hover-mixin", action="store_true", help="Do not emit the hover() mixin block")
    parser.add_argument("--no-font-size-mixin", action="store_true", help="Emit font-size as a plain declaration")
    parser.add_argument("--width", type=int, default=ExtractorConfig.viewport_width, help="Viewport width")
    parser.add_argument("--height", type=int, default=ExtractorConfig.viewport_height, help="Viewport height")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(main_async(args))


if __name__ == "__main__":
    main()
