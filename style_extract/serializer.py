from dataclasses import dataclass
from typing import Dict, List, Optional

from style_extract.constants import FONT_SIZE_MIXIN, HOVER_MIXIN, ROOT_FONT_SIZE_PX
from style_extract.tree import StyleNode
from style_extract.values import font_size_to_mixin_arg

INDENT = "  "


@dataclass(frozen=True)
class SerializeOptions:
    emit_media_query_mixins: bool = True
    emit_hover_mixin: bool = True
    emit_font_size_mixin: bool = True


def _declaration_lines(styles: Dict[str, str], pad: str, options: SerializeOptions) -> List[str]:
    lines = []
    for prop, value in styles.items():
        if prop == "font-size" and options.emit_font_size_mixin:
            size = font_size_to_mixin_arg(value, ROOT_FONT_SIZE_PX)
            if size is not None:
                lines.append(f"{pad}@include {FONT_SIZE_MIXIN}({size});")
                continue
        lines.append(f"{pad}{prop}: {value};")
    return lines


def _nested_block(header: str, styles: Dict[str, str], pad: str, options: SerializeOptions) -> List[str]:
    lines = [f"{pad}{header} {{"]
    lines.extend(_declaration_lines(styles, pad + INDENT, options))
    lines.append(f"{pad}}}")
    return lines


def _node_lines(node: StyleNode, level: int, options: SerializeOptions) -> List[str]:
    pad = INDENT * level
    inner = pad + INDENT
    lines = [f"{pad}{node.selector} {{"]
    lines.extend(_declaration_lines(node.styles, inner, options))

    for pseudo, styles in node.pseudo_elements.items():
        if styles:
            lines.extend(_nested_block(f"&{pseudo}", styles, inner, options))

    if options.emit_media_query_mixins:
        for mixin, styles in node.media_queries.items():
            if styles:
                lines.extend(_nested_block(f"@include {mixin}", styles, inner, options))

    if options.emit_hover_mixin and node.hover_styles:
        lines.extend(_nested_block(f"@include {HOVER_MIXIN}()", node.hover_styles, inner, options))

    if node.children:
        lines.append("")
        for child in node.children:
            lines.extend(_node_lines(child, level + 1, options))
            lines.append("")

    lines.append(f"{pad}}}")
    return lines


def serialize(tree: StyleNode, options: Optional[SerializeOptions] = None) -> str:
    """Render a style tree as nested SCSS.

    ``font-size`` becomes ``@include font-size(N)`` (px, or rem at 1rem = 10px),
    pseudo-elements become ``&::before``/``&::after`` blocks, breakpoints become
    ``@include <mixin>`` blocks and hover styles a single ``@include hover()``.
    """
    return "\n".join(_node_lines(tree, 0, options or SerializeOptions())) + "\n"
