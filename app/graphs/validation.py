"""
Structural validation of draft graphs.

``validate_graph`` is pure and returns findings as data. The same function
serves the editor's live feedback and the submission gate; the two differ
only in how nodes unreachable from the start scene are reported.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from app.graphs.model import (
    MAX_COMIC_TITLE_LENGTH,
    MAX_COVER_IMAGE_LENGTH,
    MAX_NODE_ID_LENGTH,
    MAX_SCENE_TITLE_LENGTH,
    ComicMeta,
    DraftGraph,
    SceneNode,
)


class ValidationPolicy(str, Enum):
    SUBMISSION = "submission"
    EDITOR = "editor"


# External lookups (uploaded file ownership, MIME type) plug in here.
ReferenceCheck = Callable[[DraftGraph], Iterable[str]]


@dataclass
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    reachable: set[str] = field(default_factory=set)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, list[str]]:
        return {"errors": list(self.errors), "warnings": list(self.warnings)}


def index_nodes(graph: DraftGraph) -> tuple[dict[str, SceneNode], list[str]]:
    """Map node ids to nodes, first occurrence wins. Returns the map and the duplicate ids."""
    node_map: dict[str, SceneNode] = {}
    duplicates: list[str] = []
    for node in graph.nodes:
        if node.id in node_map:
            duplicates.append(node.id)
            continue
        node_map[node.id] = node
    return node_map, duplicates


def reachable_node_ids(graph: DraftGraph, node_map: dict[str, SceneNode] | None = None) -> set[str]:
    """Breadth-first walk over button edges from the start node."""
    if node_map is None:
        node_map, _ = index_nodes(graph)
    start = graph.comic_meta.start_node_id
    if start not in node_map:
        return set()

    visited: set[str] = set()
    queue = deque([start])
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        for button in node_map[current].buttons:
            if button.target_node_id in node_map and button.target_node_id not in visited:
                queue.append(button.target_node_id)
    return visited


def validate_graph(
    graph: DraftGraph,
    *,
    policy: ValidationPolicy = ValidationPolicy.SUBMISSION,
    reference_check: ReferenceCheck | None = None,
) -> ValidationReport:
    report = ValidationReport()

    if not graph.nodes:
        report.errors.append("The comic has no nodes; add at least one scene.")
        return report

    node_map, duplicates = index_nodes(graph)
    for node_id in duplicates:
        report.errors.append(f"Duplicate node id: {node_id}")
    if "" in node_map:
        report.errors.append("Every node must have an id.")
    _check_meta(graph.comic_meta, report)

    start = graph.comic_meta.start_node_id
    if start not in node_map:
        report.errors.append(f"Start node '{start}' does not exist.")
        return report

    missing_images: list[str] = []
    for node in node_map.values():
        _check_node(node, node_map, report)
        if not node.has_image:
            missing_images.append(node.label)
    if missing_images:
        report.warnings.append(f"Scenes without an image: {', '.join(missing_images)}")

    report.reachable = reachable_node_ids(graph, node_map)
    for node_id, node in node_map.items():
        if node_id in report.reachable:
            continue
        message = f"Node {node_id} is unreachable from the start node."
        if policy is ValidationPolicy.SUBMISSION:
            report.errors.append(message)
        else:
            report.warnings.append(message)

    if not any(node_map[node_id].is_ending for node_id in report.reachable):
        report.errors.append("No ending is reachable from the start node.")
    if not any(node.is_ending for node in node_map.values()):
        report.errors.append("Mark at least one node as an ending.")

    if reference_check is not None:
        report.errors.extend(reference_check(graph))

    return report


def _check_meta(meta: ComicMeta, report: ValidationReport) -> None:
    if len(meta.title) > MAX_COMIC_TITLE_LENGTH:
        report.errors.append(f"The comic title is longer than {MAX_COMIC_TITLE_LENGTH} characters.")
    if len(meta.cover_image) > MAX_COVER_IMAGE_LENGTH:
        report.errors.append(f"The cover image URL is longer than {MAX_COVER_IMAGE_LENGTH} characters.")


def _check_node(node: SceneNode, node_map: dict[str, SceneNode], report: ValidationReport) -> None:
    if len(node.id) > MAX_NODE_ID_LENGTH:
        report.errors.append(f"Node id {node.id} is longer than {MAX_NODE_ID_LENGTH} characters.")
    if len(node.title) > MAX_SCENE_TITLE_LENGTH:
        report.errors.append(f"Node {node.id} title is longer than {MAX_SCENE_TITLE_LENGTH} characters.")
    if not node.is_ending and not node.buttons:
        report.errors.append(f"Node {node.id} is not an ending and needs at least one button.")

    seen_button_ids: set[str] = set()
    seen_targets: set[str] = set()
    duplicate_target = False
    for button in node.buttons:
        if button.id in seen_button_ids:
            report.errors.append(f"Duplicate button id {button.id} in node {node.id}.")
        seen_button_ids.add(button.id)

        label = button.text or button.id
        if button.target_node_id not in node_map:
            report.errors.append(
                f"Button '{label}' in node {node.id} points to a missing node '{button.target_node_id}'."
            )
        elif button.target_node_id == node.id:
            report.warnings.append(f"Button '{label}' in node {node.id} is a self-targeting button.")

        if button.target_node_id in seen_targets:
            duplicate_target = True
        seen_targets.add(button.target_node_id)

    if duplicate_target:
        report.warnings.append(f"Node {node.id} has several buttons leading to the same node.")
