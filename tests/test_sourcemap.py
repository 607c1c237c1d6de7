"""Tests for source map resolution and authored property extraction."""

import asyncio
import base64
import json

from style_extract.sourcemap import (
    SourceMapResolver,
    StylesheetRef,
    extract_authored_properties,
    find_source_mapping_url,
    main_source_names,
    parse_rules,
)

CSS_URL = "https://example.com/assets/css/main.css"
MAP_URL = "https://example.com/assets/css/main.css.map"

MAIN_SCSS = """\
$primary: #333;

.card {
  padding: 10px;
  $local: 4px;
  @include sp {
    margin: 0;
  }
  &:hover {
    color: red;
  }
  li:first-child {
    width: 10px;
  }
  unknown-prop: 1;
  @if $local {
    opacity: 1;
  }
}
"""

MAIN_CSS = ".card { padding: 10px; margin: 0; }\n/*# sourceMappingURL=main.css.map */\n"


def resolve(page, stylesheets):
    return asyncio.run(SourceMapResolver(page.fetch_text).resolve(stylesheets))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestExtractAuthoredProperties:
    def test_indented_declarations(self):
        assert extract_authored_properties(MAIN_SCSS) == frozenset({"padding", "margin", "color", "width", "opacity"})

    def test_unindented_and_single_space_lines_ignored(self):
        assert extract_authored_properties("color: red;\n padding: 1px;") == frozenset()

    def test_variables_and_directives_ignored(self):
        text = "  $color: red;\n  @include foo;\n  %placeholder: x;\n  include: y;"
        assert extract_authored_properties(text) == frozenset()

    def test_tab_indentation(self):
        assert extract_authored_properties("\tdisplay: grid") == frozenset({"display"})


class TestNames:
    def test_main_source_names(self):
        assert main_source_names("app.min.css") == {"app.scss", "app.sass"}
        assert main_source_names("main.css") == {"main.scss", "main.sass"}

    def test_last_mapping_comment_wins(self):
        css = "/*# sourceMappingURL=old.map */ .a{}\n/*# sourceMappingURL=new.css.map */"
        assert find_source_mapping_url(css) == "new.css.map"
        assert find_source_mapping_url(".a { color: red }") is None


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestResolveEmbeddedContents:
    def test_only_main_non_partial_source_is_scanned(self, fake_page):
        source_map = {
            "version": 3,
            "sources": ["../scss/_vars.scss", "../scss/main.scss", "../scss/other.scss"],
            "sourcesContent": ["  color: red;", ".a {\n  padding: 1px;\n}", ".b {\n  width: 2px;\n}"],
        }
        page = fake_page(resources={CSS_URL: MAIN_CSS, MAP_URL: json.dumps(source_map)})
        index = resolve(page, [StylesheetRef(url=CSS_URL)])

        assert index.authored_in("main.css") == frozenset({"padding"})
        assert index.all_properties == frozenset({"padding"})
        assert page.fetched == [CSS_URL, MAP_URL]

    def test_status_shape(self, fake_page):
        source_map = {"sources": ["main.scss"], "sourcesContent": [".a {\n  color: red;\n  margin: 0;\n}"]}
        page = fake_page(resources={CSS_URL: MAIN_CSS, MAP_URL: json.dumps(source_map)})
        status = resolve(page, [StylesheetRef(url=CSS_URL)]).status()
        assert status == {
            "hasSourceMap": True,
            "propertyCount": 2,
            "properties": ["color", "margin"],
            "byFile": {"main.css": {"count": 2, "properties": ["color", "margin"]}},
        }


class TestResolveFetchedSources:
    def test_fetches_only_main_source(self, fake_page):
        source_map = {
            "sources": [
                "../scss/main.scss",
                "../../node_modules/lib/main.scss",
                "../scss/_partial.scss",
                "vendor.css",
            ]
        }
        page = fake_page(
            resources={
                CSS_URL: MAIN_CSS,
                MAP_URL: json.dumps(source_map),
                "https://example.com/assets/scss/main.scss": MAIN_SCSS,
            }
        )
        index = resolve(page, [StylesheetRef(url=CSS_URL)])
        assert page.fetched == [CSS_URL, MAP_URL, "https://example.com/assets/scss/main.scss"]
        assert "padding" in index.authored_in("main.css")

    def test_source_root_is_applied(self, fake_page):
        source_map = {"sourceRoot": "/src/", "sources": ["main.scss"]}
        page = fake_page(
            resources={
                CSS_URL: MAIN_CSS,
                MAP_URL: json.dumps(source_map),
                "https://example.com/src/main.scss": ".a {\n  gap: 4px;\n}",
            }
        )
        index = resolve(page, [StylesheetRef(url=CSS_URL)])
        assert index.authored_in("main.css") == frozenset({"gap"})

    def test_missing_source_is_recovered(self, fake_page):
        page = fake_page(resources={CSS_URL: MAIN_CSS, MAP_URL: json.dumps({"sources": ["main.scss"]})})
        index = resolve(page, [StylesheetRef(url=CSS_URL)])
        assert index.authored_in("main.css") == frozenset()
        assert any("main.scss" in note for note in index.notes)


class TestExclusionAndRecovery:
    def test_stylesheet_without_map_is_excluded(self, fake_page):
        page = fake_page(resources={CSS_URL: ".card { color: red }"})
        index = resolve(page, [StylesheetRef(url=CSS_URL)])
        assert not index.has_source_map
        assert index.all_properties == frozenset()
        assert parse_rules(index).is_empty()

    def test_failed_map_keeps_rules_with_empty_properties(self, fake_page):
        page = fake_page(resources={CSS_URL: MAIN_CSS})
        index = resolve(page, [StylesheetRef(url=CSS_URL)])
        assert index.authored_in("main.css") == frozenset()
        assert index.notes
        assert [r.full_selector for r in parse_rules(index).rules] == [".card"]

    def test_malformed_map_json_is_recovered(self, fake_page):
        page = fake_page(resources={CSS_URL: MAIN_CSS, MAP_URL: "{not json"})
        index = resolve(page, [StylesheetRef(url=CSS_URL)])
        assert index.authored_in("main.css") == frozenset()
        assert any("Malformed" in note for note in index.notes)

    def test_failed_stylesheet_does_not_stop_the_rest(self, fake_page):
        other_css = "https://example.com/assets/css/app.css"
        source_map = {"sources": ["app.scss"], "sourcesContent": [".x {\n  color: red;\n}"]}
        page = fake_page(
            resources={
                other_css: ".x { color: red }\n/*# sourceMappingURL=app.css.map */",
                "https://example.com/assets/css/app.css.map": json.dumps(source_map),
            }
        )
        index = resolve(page, [StylesheetRef(url=CSS_URL), StylesheetRef(url=other_css)])
        assert list(index.entries) == ["app.css"]
        assert index.all_properties == frozenset({"color"})


class TestInlineStylesheets:
    def test_inline_map_relative_to_page(self, fake_page):
        source_map = {"file": "inline.css", "sources": ["inline.scss"], "sourcesContent": [".a {\n  z-index: 2;\n}"]}
        page = fake_page(resources={"https://example.com/maps/inline.css.map": json.dumps(source_map)})
        sheet = StylesheetRef(
            text=".a { z-index: 2 }\n/*# sourceMappingURL=maps/inline.css.map */",
            base_url="https://example.com/page.html",
        )
        index = resolve(page, [sheet])
        assert index.authored_in("inline.css") == frozenset({"z-index"})

    def test_data_uri_map(self, fake_page):
        source_map = {"sources": ["theme.scss"], "sourcesContent": [".t {\n  opacity: 0.5;\n}"], "file": "theme.css"}
        encoded = base64.b64encode(json.dumps(source_map).encode()).decode()
        sheet = StylesheetRef(
            text=f".t {{ opacity: 0.5 }}\n/*# sourceMappingURL=data:application/json;base64,{encoded} */",
            base_url="https://example.com/",
        )
        page = fake_page()
        index = resolve(page, [sheet])
        assert index.authored_in("theme.css") == frozenset({"opacity"})
        assert page.fetched == []
