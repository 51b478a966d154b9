"""
Normalization of untrusted draft payloads into a canonical ``DraftGraph``.

Every draft read from a request or from storage goes through
``normalize_payload`` first. Normalization repairs instead of rejecting:
unknown shapes fall back to a single-scene draft, missing identifiers are
synthesized from position, numbers are coerced and clamped, and pixel
coordinates are rescaled onto the percentage canvas. The result is a fixed
point: normalizing an already normalized draft returns an equal draft.
"""

from __future__ import annotations

import json
import math
from enum import Enum
from typing import Any

from pydantic.alias_generators import to_camel

from app.graphs.model import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    DEFAULT_BG_COLOR,
    DEFAULT_BORDER_COLOR,
    DEFAULT_BUTTON_HEIGHT,
    DEFAULT_BUTTON_WIDTH,
    DEFAULT_BUTTON_X,
    DEFAULT_BUTTON_Y,
    DEFAULT_ESTIMATED_MINUTES,
    DEFAULT_TEXT_COLOR,
    MAX_ESTIMATED_MINUTES,
    MIN_BUTTON_HEIGHT,
    MIN_BUTTON_WIDTH,
    SCHEMA_VERSION,
    STYLE_LIMITS,
    ChoiceButton,
    ComicMeta,
    DraftGraph,
    SceneNode,
    default_start_node,
)


class PayloadShape(str, Enum):
    CANONICAL = "canonical"
    LEGACY_PAGES = "legacy_pages"
    UNRECOGNIZED = "unrecognized"


_TEXT_ALIGNMENTS = ("left", "center", "right")
_FALSE_STRINGS = {"", "0", "false", "no", "off"}


def detect_shape(raw: Any) -> PayloadShape:
    """Classify a raw payload into one of the recognized draft shapes."""
    if not isinstance(raw, dict):
        return PayloadShape.UNRECOGNIZED
    if (
        raw.get("schemaVersion", SCHEMA_VERSION) == SCHEMA_VERSION
        and isinstance(raw.get("comicMeta"), dict)
        and isinstance(raw.get("nodes"), list)
    ):
        return PayloadShape.CANONICAL
    if isinstance(raw.get("pages"), list):
        return PayloadShape.LEGACY_PAGES
    return PayloadShape.UNRECOGNIZED


def normalize_payload(raw: Any) -> DraftGraph:
    """Turn anything into a canonical draft graph. Never raises."""
    if isinstance(raw, DraftGraph):
        raw = raw.to_payload()
    elif isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except ValueError:
            raw = None

    shape = detect_shape(raw)
    if shape is PayloadShape.CANONICAL:
        return _from_canonical(raw)
    if shape is PayloadShape.LEGACY_PAGES:
        return _from_legacy_pages(raw)
    return _assemble({}, [])


def _from_canonical(raw: dict) -> DraftGraph:
    nodes = [_normalize_node(_as_dict(node), index) for index, node in enumerate(raw["nodes"])]
    return _assemble(raw["comicMeta"], nodes)


def _from_legacy_pages(raw: dict) -> DraftGraph:
    """Pages/choices drafts written before the node editor existed."""
    legacy_comic = _as_dict(raw.get("comic"))
    nodes: list[SceneNode] = []
    for index, item in enumerate(raw["pages"]):
        page = _as_dict(item)
        panels = page.get("panels")
        first_panel = _as_dict(panels[0]) if isinstance(panels, list) and panels else {}
        choices = page.get("choices") if isinstance(page.get("choices"), list) else []
        buttons = []
        for choice_index, choice in enumerate(choices):
            choice = _as_dict(choice)
            buttons.append(
                {
                    "id": choice.get("id") or choice.get("choiceId"),
                    "text": choice.get("text"),
                    "targetNodeId": choice.get("targetPageId"),
                    "y": DEFAULT_BUTTON_Y + choice_index * (DEFAULT_BUTTON_HEIGHT + 4),
                }
            )
        nodes.append(
            _normalize_node(
                {
                    "id": page.get("pageId"),
                    "title": page.get("title"),
                    "imageUrl": first_panel.get("imageUrl"),
                    "order": index + 1,
                    "isEnding": page.get("isEnding"),
                    "buttons": buttons,
                },
                index,
            )
        )

    meta = {
        "title": legacy_comic.get("title"),
        "description": legacy_comic.get("description"),
        "coverImage": legacy_comic.get("coverImage"),
        "genres": legacy_comic.get("genres"),
        "tags": legacy_comic.get("tags"),
        "startNodeId": legacy_comic.get("startPageId"),
        "estimatedMinutes": legacy_comic.get("estimatedMinutes"),
    }
    return _assemble(meta, nodes)


def _assemble(raw_meta: Any, nodes: list[SceneNode]) -> DraftGraph:
    meta = _as_dict(raw_meta)
    if not nodes:
        nodes = [default_start_node()]

    node_ids = {node.id for node in nodes}
    start_node_id = _as_text(meta.get("startNodeId"))
    if start_node_id not in node_ids:
        start_node_id = nodes[0].id

    estimated = _as_int(meta.get("estimatedMinutes"), DEFAULT_ESTIMATED_MINUTES)
    comic_meta = ComicMeta(
        title=_as_text(meta.get("title")),
        description=_as_text(meta.get("description")),
        cover_file_id=_as_optional_text(meta.get("coverFileId")),
        cover_image=_as_text(meta.get("coverImage")),
        genres=_as_text_list(meta.get("genres")),
        tags=_as_text_list(meta.get("tags")),
        start_node_id=start_node_id,
        estimated_minutes=int(_clamp(estimated, 1, MAX_ESTIMATED_MINUTES)),
    )
    return DraftGraph(schema_version=SCHEMA_VERSION, comic_meta=comic_meta, nodes=nodes)


def _normalize_node(raw: dict, index: int) -> SceneNode:
    node_id = _as_id(raw.get("id"), f"node-{index + 1}")
    raw_buttons = raw.get("buttons") if isinstance(raw.get("buttons"), list) else []
    buttons = [
        _normalize_button(_as_dict(button), f"{node_id}-btn-{button_index + 1}")
        for button_index, button in enumerate(raw_buttons)
    ]
    return SceneNode(
        id=node_id,
        title=_as_text(raw.get("title")),
        image_file_id=_as_optional_text(raw.get("imageFileId")),
        image_url=_as_text(raw.get("imageUrl")),
        order=_as_int(raw.get("order"), index + 1),
        is_ending=_as_bool(raw.get("isEnding"), False),
        buttons=buttons,
    )


def _normalize_button(raw: dict, fallback_id: str) -> ChoiceButton:
    width = _clamp(_to_percent(raw.get("w"), CANVAS_WIDTH, DEFAULT_BUTTON_WIDTH), MIN_BUTTON_WIDTH, 100)
    height = _clamp(_to_percent(raw.get("h"), CANVAS_HEIGHT, DEFAULT_BUTTON_HEIGHT), MIN_BUTTON_HEIGHT, 100)
    width = round(width, 2)
    height = round(height, 2)
    x = round(_clamp(_to_percent(raw.get("x"), CANVAS_WIDTH, DEFAULT_BUTTON_X), 0, 100 - width), 2)
    y = round(_clamp(_to_percent(raw.get("y"), CANVAS_HEIGHT, DEFAULT_BUTTON_Y), 0, 100 - height), 2)

    style: dict[str, float] = {}
    for field_name, (default, low, high) in STYLE_LIMITS.items():
        raw_value = raw.get(to_camel(field_name))
        style[field_name] = _clamp(_as_number(raw_value, default), low, high)

    text_align = raw.get("textAlign")
    return ChoiceButton(
        id=_as_id(raw.get("id"), fallback_id),
        text=_as_text(raw.get("text")),
        target_node_id=_as_text(raw.get("targetNodeId")),
        x=x,
        y=y,
        w=width,
        h=height,
        bg_color=_as_text(raw.get("bgColor")) or DEFAULT_BG_COLOR,
        text_color=_as_text(raw.get("textColor")) or DEFAULT_TEXT_COLOR,
        border_color=_as_text(raw.get("borderColor")) or DEFAULT_BORDER_COLOR,
        text_align=text_align if text_align in _TEXT_ALIGNMENTS else "center",
        visible=_as_bool(raw.get("visible"), True),
        **style,
    )


def _to_percent(value: Any, canvas_size: int, default: float) -> float:
    """Values outside 0..100 are taken as pixels on the virtual canvas."""
    number = _as_number(value, default)
    if number > 100 or number < 0:
        return number / canvas_size * 100
    return number


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_number(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number):
        return default
    return number


def _as_int(value: Any, default: int) -> int:
    number = int(_as_number(value, 0))
    return number or default


def _as_text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    try:
        return str(value)
    except ValueError:
        # int digit limit
        return ""


def _as_optional_text(value: Any) -> str | None:
    return _as_text(value) or None


def _as_id(value: Any, fallback: str) -> str:
    return _as_text(value) or fallback


def _as_text_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [_as_text(item) for item in value if _as_text(item)]


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)
