"""
Draft graph model for branching comics.

A draft is a set of scene nodes joined by choice buttons, plus comic-level
metadata. Field names are snake_case in Python and camelCase on the wire
(the persisted revision payload), via the pydantic alias generator.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


SCHEMA_VERSION = 2

# Fixed virtual canvas used to reinterpret pixel coordinates as percentages.
CANVAS_WIDTH = 1600
CANVAS_HEIGHT = 900

MIN_BUTTON_WIDTH = 6.0
MIN_BUTTON_HEIGHT = 4.0

DEFAULT_BUTTON_X = 10.0
DEFAULT_BUTTON_Y = 10.0
DEFAULT_BUTTON_WIDTH = 24.0
DEFAULT_BUTTON_HEIGHT = 8.0
DEFAULT_BG_COLOR = "#F4745F"
DEFAULT_TEXT_COLOR = "#1C1614"
DEFAULT_BORDER_COLOR = "#1C1614"

# (default, minimum, maximum)
STYLE_LIMITS: dict[str, tuple[float, float, float]] = {
    "border_width": (2, 0, 24),
    "opacity": (1, 0, 1),
    "radius": (12, 0, 100),
    "font_size": (16, 10, 72),
    "font_weight": (700, 300, 900),
}

DEFAULT_ESTIMATED_MINUTES = 5
MAX_ESTIMATED_MINUTES = 999

DEFAULT_START_NODE_ID = "node-1"
DEFAULT_START_NODE_TITLE = "Opening scene"

# Widths of the published comic and page columns.
MAX_NODE_ID_LENGTH = 50
MAX_COMIC_TITLE_LENGTH = 100
MAX_SCENE_TITLE_LENGTH = 255
MAX_COVER_IMAGE_LENGTH = 500

TextAlign = Literal["left", "center", "right"]


class GraphModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChoiceButton(GraphModel):
    """One outgoing edge of a scene, drawn as a hotspot over the scene image."""

    id: str
    text: str = ""
    target_node_id: str = ""

    # Position and size are percentages of the virtual canvas.
    x: float = DEFAULT_BUTTON_X
    y: float = DEFAULT_BUTTON_Y
    w: float = DEFAULT_BUTTON_WIDTH
    h: float = DEFAULT_BUTTON_HEIGHT

    bg_color: str = DEFAULT_BG_COLOR
    text_color: str = DEFAULT_TEXT_COLOR
    border_color: str = DEFAULT_BORDER_COLOR
    border_width: float = 2
    opacity: float = 1
    radius: float = 12
    font_size: float = 16
    font_weight: float = 700
    text_align: TextAlign = "center"
    visible: bool = True


class SceneNode(GraphModel):
    id: str
    title: str = ""
    image_file_id: str | None = None
    image_url: str = ""
    order: int = 1
    is_ending: bool = False
    buttons: list[ChoiceButton] = Field(default_factory=list)

    @property
    def has_image(self) -> bool:
        return bool(self.image_file_id or self.image_url)

    @property
    def label(self) -> str:
        return self.title or self.id


class ComicMeta(GraphModel):
    title: str = ""
    description: str = ""
    cover_file_id: str | None = None
    cover_image: str = ""
    genres: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    start_node_id: str = DEFAULT_START_NODE_ID
    estimated_minutes: int = DEFAULT_ESTIMATED_MINUTES


class DraftGraph(GraphModel):
    schema_version: int = SCHEMA_VERSION
    comic_meta: ComicMeta = Field(default_factory=ComicMeta)
    nodes: list[SceneNode] = Field(default_factory=list)

    def to_payload(self) -> dict:
        """Serialize to the persisted camelCase payload."""
        return self.model_dump(by_alias=True, mode="json")

    @property
    def ending_count(self) -> int:
        return sum(1 for node in self.nodes if node.is_ending)


def default_start_node() -> SceneNode:
    return SceneNode(id=DEFAULT_START_NODE_ID, title=DEFAULT_START_NODE_TITLE, order=1)


def default_graph(
    title: str = "",
    description: str = "",
    *,
    cover_file_id: str | None = None,
    cover_image: str = "",
    genres: list[str] | None = None,
    tags: list[str] | None = None,
    estimated_minutes: int | None = None,
) -> DraftGraph:
    """Single-scene draft every new comic starts from."""
    return DraftGraph(
        comic_meta=ComicMeta(
            title=title,
            description=description,
            cover_file_id=cover_file_id,
            cover_image=cover_image,
            genres=list(genres or []),
            tags=list(tags or []),
            start_node_id=DEFAULT_START_NODE_ID,
            estimated_minutes=estimated_minutes or DEFAULT_ESTIMATED_MINUTES,
        ),
        nodes=[default_start_node()],
    )
