"""Property tables shared by the parser, resolver and tree builder."""

from typing import Dict, List, Tuple

MAX_DEPTH = 5

IMPORTANT_PROPS = [
    "display",
    "position",
    "top",
    "right",
    "bottom",
    "left",
    "z-index",
    "float",
    "clear",
    "box-sizing",
    "width",
    "min-width",
    "max-width",
    "height",
    "min-height",
    "max-height",
    "margin",
    "margin-top",
    "margin-right",
    "margin-bottom",
    "margin-left",
    "padding",
    "padding-top",
    "padding-right",
    "padding-bottom",
    "padding-left",
    "overflow",
    "overflow-x",
    "overflow-y",
    "flex",
    "flex-direction",
    "flex-wrap",
    "flex-grow",
    "flex-shrink",
    "flex-basis",
    "justify-content",
    "align-items",
    "align-content",
    "align-self",
    "order",
    "gap",
    "row-gap",
    "column-gap",
    "grid-template-columns",
    "grid-template-rows",
    "grid-column",
    "grid-row",
    "font-family",
    "font-size",
    "font-weight",
    "font-style",
    "line-height",
    "letter-spacing",
    "text-align",
    "text-decoration",
    "text-decoration-color",
    "text-transform",
    "white-space",
    "vertical-align",
    "color",
    "background",
    "background-color",
    "background-image",
    "background-size",
    "background-position",
    "background-repeat",
    "border",
    "border-top",
    "border-right",
    "border-bottom",
    "border-left",
    "border-width",
    "border-style",
    "border-color",
    "border-top-color",
    "border-right-color",
    "border-bottom-color",
    "border-left-color",
    "border-radius",
    "outline",
    "outline-color",
    "box-shadow",
    "opacity",
    "transform",
    "transition",
    "cursor",
    "visibility",
    "object-fit",
    "content",
]

IMPORTANT_PROP_SET = frozenset(IMPORTANT_PROPS)

COLOR_PROPS = frozenset([
    "color",
    "background",
    "background-color",
    "border",
    "border-top",
    "border-right",
    "border-bottom",
    "border-left",
    "border-color",
    "border-top-color",
    "border-right-color",
    "border-bottom-color",
    "border-left-color",
    "outline",
    "outline-color",
    "text-decoration-color",
    "box-shadow",
])

# A property may have several computed literals that all mean "not authored".
DEFAULT_VALUES: Dict[str, List[str]] = {
    "position": ["static"],
    "top": ["auto", "0px"],
    "right": ["auto", "0px"],
    "bottom": ["auto", "0px"],
    "left": ["auto", "0px"],
    "z-index": ["auto"],
    "float": ["none"],
    "clear": ["none"],
    "box-sizing": ["content-box"],
    "width": ["auto"],
    "min-width": ["auto", "0px"],
    "max-width": ["none"],
    "height": ["auto"],
    "min-height": ["auto", "0px"],
    "max-height": ["none"],
    "margin": ["0px"],
    "margin-top": ["0px"],
    "margin-right": ["0px"],
    "margin-bottom": ["0px"],
    "margin-left": ["0px"],
    "padding": ["0px"],
    "padding-top": ["0px"],
    "padding-right": ["0px"],
    "padding-bottom": ["0px"],
    "padding-left": ["0px"],
    "overflow": ["visible"],
    "overflow-x": ["visible"],
    "overflow-y": ["visible"],
    "flex": ["0 1 auto"],
    "flex-direction": ["row"],
    "flex-wrap": ["nowrap"],
    "flex-grow": ["0"],
    "flex-shrink": ["1"],
    "flex-basis": ["auto"],
    "justify-content": ["normal", "flex-start"],
    "align-items": ["normal", "stretch"],
    "align-content": ["normal"],
    "align-self": ["auto"],
    "order": ["0"],
    "gap": ["normal", "normal normal"],
    "row-gap": ["normal"],
    "column-gap": ["normal"],
    "grid-template-columns": ["none"],
    "grid-template-rows": ["none"],
    "grid-column": ["auto", "auto / auto"],
    "grid-row": ["auto", "auto / auto"],
    "font-weight": ["400", "normal"],
    "font-style": ["normal"],
    "letter-spacing": ["normal"],
    "text-align": ["start", "left"],
    "text-decoration": ["none"],
    "text-transform": ["none"],
    "white-space": ["normal"],
    "vertical-align": ["baseline"],
    "background-color": ["rgba(0, 0, 0, 0)", "transparent"],
    "background-image": ["none"],
    "background-size": ["auto", "auto auto"],
    "background-position": ["0% 0%"],
    "background-repeat": ["repeat"],
    "border-width": ["0px"],
    "border-style": ["none"],
    "border-radius": ["0px"],
    "outline": ["none"],
    "box-shadow": ["none"],
    "opacity": ["1"],
    "transform": ["none"],
    "transition": ["all 0s ease 0s", "all"],
    "cursor": ["auto"],
    "visibility": ["visible"],
    "object-fit": ["fill"],
    "content": ["normal", "none"],
}

# Computed shorthands serialize with a trailing colour, so the default is a prefix.
DEFAULT_PATTERNS: Dict[str, str] = {
    "border": r"^0px none\b",
    "border-top": r"^0px none\b",
    "border-right": r"^0px none\b",
    "border-bottom": r"^0px none\b",
    "border-left": r"^0px none\b",
    "outline": r"\bnone\b",
    "text-decoration": r"^none\b",
    "background": r"^rgba\(0, 0, 0, 0\) none\b",
    "transition": r"^all 0s ease 0s$",
}

GENERIC_DEFAULTS = frozenset(["none", "normal", "auto"])

BLOCK_TAGS = frozenset([
    "address", "article", "aside", "blockquote", "dd", "details", "dialog", "div",
    "dl", "dt", "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2",
    "h3", "h4", "h5", "h6", "header", "hgroup", "hr", "main", "nav", "ol", "p",
    "pre", "section", "summary", "ul", "body", "html",
])

TAG_DISPLAY_DEFAULTS: Dict[str, str] = {
    "li": "list-item",
    "table": "table",
    "tr": "table-row",
    "td": "table-cell",
    "th": "table-cell",
    "thead": "table-header-group",
    "tbody": "table-row-group",
    "tfoot": "table-footer-group",
    "img": "inline",
    "button": "inline-block",
    "input": "inline-block",
    "select": "inline-block",
    "textarea": "inline-block",
}

SHORTHAND_MAP: Dict[str, List[str]] = {
    "margin": ["margin-top", "margin-right", "margin-bottom", "margin-left"],
    "padding": ["padding-top", "padding-right", "padding-bottom", "padding-left"],
    "border": [
        "border-top",
        "border-right",
        "border-bottom",
        "border-left",
        "border-width",
        "border-style",
        "border-color",
        "border-top-color",
        "border-right-color",
        "border-bottom-color",
        "border-left-color",
    ],
    "border-color": [
        "border-top-color",
        "border-right-color",
        "border-bottom-color",
        "border-left-color",
    ],
    "background": [
        "background-color",
        "background-image",
        "background-size",
        "background-position",
        "background-repeat",
    ],
    "flex": ["flex-grow", "flex-shrink", "flex-basis"],
    "gap": ["row-gap", "column-gap"],
    "overflow": ["overflow-x", "overflow-y"],
    "outline": ["outline-color"],
}

# Normalized condition (no whitespace, lower case) -> breakpoint mixin.
# Combined ranges come first because lookup is a substring test.
MEDIA_QUERY_MIXINS: List[Tuple[str, str]] = [
    ("(min-width:768px)and(max-width:1023px)", "tab"),
    ("(min-width:768px)and(max-width:1024px)", "tab"),
    ("(max-width:480px)", "sp-small"),
    ("(max-width:767px)", "sp"),
    ("(max-width:768px)", "sp"),
    ("(min-width:768px)", "tab-up"),
    ("(min-width:769px)", "tab-up"),
    ("(max-width:1023px)", "tab-down"),
    ("(max-width:1024px)", "tab-down"),
    ("(min-width:1024px)", "pc"),
    ("(min-width:1025px)", "pc"),
    ("(min-width:1440px)", "pc-wide"),
    ("(hover:hover)", "hover-device"),
]

BREAKPOINT_MIXIN_NAMES = frozenset(name for _, name in MEDIA_QUERY_MIXINS)

HOVER_MIXIN = "hover"
FONT_SIZE_MIXIN = "font-size"
ROOT_FONT_SIZE_PX = 10.0

PSEUDO_ELEMENTS = ("::before", "::after")

SCSS_CONTROL_KEYWORDS = frozenset([
    "if", "else", "for", "each", "while", "include", "extend", "import", "use",
    "forward", "mixin", "function", "return", "warn", "error", "debug",
])

SCSS_EXTENSIONS = (".scss", ".sass")

DEPENDENCY_DIRS = ("node_modules/", "bower_components/", "vendor/")

SKIP_TAGS = frozenset(["script", "style", "link", "meta", "noscript", "template", "br", "wbr"])

GENERIC_BLOCK_TAG = "div"
