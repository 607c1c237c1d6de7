from dataclasses import dataclass
from typing import Any, Dict, Optional

from style_extract.constants import MAX_DEPTH
from style_extract.serializer import SerializeOptions

DEFAULT_VIEWPORT = {"width": 1440, "height": 900}


def _flag(overrides: Dict[str, Any], key: str, default: bool) -> bool:
    value = overrides.get(key)
    return value if isinstance(value, bool) else default


@dataclass
class ExtractorConfig:
    """Settings for one inspection session."""
    max_depth: int = MAX_DEPTH
    use_source_map: bool = True
    emit_media_query_mixins: bool = True
    emit_hover_mixin: bool = True
    emit_font_size_mixin: bool = True
    viewport_width: int = DEFAULT_VIEWPORT["width"]
    viewport_height: int = DEFAULT_VIEWPORT["height"]
    navigation_timeout_ms: int = 60000
    settle_ms: int = 1000

    def serialize_options(self, overrides: Optional[Dict[str, Any]] = None) -> SerializeOptions:
        """Serializer flags from this config, with boolean per-call overrides.

        Override values that are not real booleans (``"false"``, ``0``, ``None``)
        are ignored and the configured flag is used.
        """
        overrides = overrides or {}
        return SerializeOptions(
            emit_media_query_mixins=_flag(overrides, "emitMediaQueryMixins", self.emit_media_query_mixins),
            emit_hover_mixin=_flag(overrides, "emitHoverMixin", self.emit_hover_mixin),
            emit_font_size_mixin=_flag(overrides, "emitFontSizeMixin", self.emit_font_size_mixin),
        )

    @property
    def viewport(self) -> Dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}
