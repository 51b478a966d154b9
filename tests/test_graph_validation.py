"""Tests for draft graph validation."""

import pytest
from hypothesis import given, strategies as st, settings

from app.graphs.model import ChoiceButton, ComicMeta, DraftGraph, SceneNode
from app.graphs.normalize import normalize_payload
from app.graphs.validation import ValidationPolicy, reachable_node_ids, validate_graph

from factories import draft, scene


def _graph(*nodes, start="start"):
    return normalize_payload(draft(*nodes, start=start))


class TestScenarios:
    def test_two_scene_story_is_clean(self):
        report = validate_graph(_graph(scene("start", buttons=("end",)), scene("end", is_ending=True)))
        assert report.errors == []
        assert report.warnings == []
        assert report.ok

    def test_unreachable_ending_reports_both_errors(self):
        report = validate_graph(_graph(scene("start", buttons=("orphan",)), scene("end", is_ending=True)))
        assert "Node end is unreachable from the start node." in report.errors
        assert "No ending is reachable from the start node." in report.errors
        assert "Button 'Go to orphan' in node start points to a missing node 'orphan'." in report.errors

    def test_self_targeting_button_is_a_single_warning(self):
        report = validate_graph(_graph(scene("start", buttons=("start",), is_ending=True)))
        assert report.errors == []
        assert report.warnings == ["Button 'Go to start' in node start is a self-targeting button."]


class TestStructure:
    def test_empty_graph_is_rejected(self):
        report = validate_graph(DraftGraph(comic_meta=ComicMeta(start_node_id="start"), nodes=[]))
        assert report.errors == ["The comic has no nodes; add at least one scene."]

    def test_missing_start_short_circuits(self):
        graph = DraftGraph(
            comic_meta=ComicMeta(start_node_id="nowhere"),
            nodes=[SceneNode(id="a", is_ending=True, image_url="https://cdn.example.com/a.png")],
        )
        report = validate_graph(graph)
        assert report.errors == ["Start node 'nowhere' does not exist."]
        assert report.warnings == []

    def test_duplicate_node_ids_first_occurrence_wins(self):
        graph = DraftGraph(
            comic_meta=ComicMeta(start_node_id="start"),
            nodes=[
                SceneNode(id="start", is_ending=True, image_url="https://cdn.example.com/a.png"),
                SceneNode(id="start", image_url="https://cdn.example.com/b.png"),
            ],
        )
        report = validate_graph(graph)
        assert report.errors == ["Duplicate node id: start"]

    def test_single_scene_story_is_valid(self):
        report = validate_graph(_graph(scene("start", is_ending=True)))
        assert report.ok
        assert report.warnings == []

    def test_dead_end_scene_needs_a_button(self):
        report = validate_graph(_graph(scene("start", buttons=("mid",)), scene("mid"), scene("end", is_ending=True)))
        assert "Node mid is not an ending and needs at least one button." in report.errors

    def test_cycles_are_allowed(self):
        report = validate_graph(
            _graph(
                scene("start", buttons=("loop",)),
                scene("loop", buttons=("start", "end")),
                scene("end", is_ending=True),
            )
        )
        assert report.errors == []

    def test_duplicate_targets_and_missing_images_are_warnings(self):
        report = validate_graph(
            _graph(
                scene("start", buttons=("end", "end")),
                scene("end", is_ending=True, image=""),
            )
        )
        assert report.errors == []
        assert "Node start has several buttons leading to the same node." in report.warnings
        assert "Scenes without an image: End" in report.warnings

    def test_graph_without_any_ending(self):
        report = validate_graph(_graph(scene("start", buttons=("start",))))
        assert "No ending is reachable from the start node." in report.errors
        assert "Mark at least one node as an ending." in report.errors

    def test_duplicate_button_ids_within_a_node(self):
        raw = draft(scene("start", buttons=("a", "b")), scene("a", is_ending=True), scene("b", is_ending=True))
        for button in raw["nodes"][0]["buttons"]:
            button["id"] = "pick"
        report = validate_graph(normalize_payload(raw))
        assert report.errors == ["Duplicate button id pick in node start."]

    def test_same_button_id_in_different_nodes_is_allowed(self):
        raw = draft(scene("start", buttons=("a",)), scene("a", buttons=("b",)), scene("b", is_ending=True))
        for node in raw["nodes"][:2]:
            node["buttons"][0]["id"] = "next"
        assert validate_graph(normalize_payload(raw)).ok

    def test_values_wider_than_published_columns_are_rejected(self):
        long_id = "scene-" + "x" * 50
        raw = draft(scene("start", buttons=(long_id,)), scene(long_id, is_ending=True), title="T" * 101)
        raw["nodes"][0]["title"] = "S" * 256
        raw["comicMeta"]["coverImage"] = "https://cdn.example.com/" + "c" * 500
        report = validate_graph(normalize_payload(raw), policy=ValidationPolicy.EDITOR)
        assert report.errors == [
            "The comic title is longer than 100 characters.",
            "The cover image URL is longer than 500 characters.",
            "Node start title is longer than 255 characters.",
            f"Node id {long_id} is longer than 50 characters.",
        ]

    def test_values_at_column_width_are_accepted(self):
        edge_id = "e" * 50
        raw = draft(scene("start", buttons=(edge_id,)), scene(edge_id, is_ending=True), title="T" * 100)
        raw["nodes"][0]["title"] = "S" * 255
        assert validate_graph(normalize_payload(raw)).ok


class TestPolicies:
    def _orphaned(self):
        return _graph(
            scene("start", buttons=("end",)),
            scene("end", is_ending=True),
            scene("draft-scene", is_ending=True),
        )

    def test_submission_treats_unreachable_as_error(self):
        report = validate_graph(self._orphaned(), policy=ValidationPolicy.SUBMISSION)
        assert report.errors == ["Node draft-scene is unreachable from the start node."]

    def test_editor_treats_unreachable_as_warning(self):
        report = validate_graph(self._orphaned(), policy=ValidationPolicy.EDITOR)
        assert report.errors == []
        assert report.warnings == ["Node draft-scene is unreachable from the start node."]

    def test_both_policies_share_one_reachability_set(self):
        graph = self._orphaned()
        submission = validate_graph(graph, policy=ValidationPolicy.SUBMISSION)
        editor = validate_graph(graph, policy=ValidationPolicy.EDITOR)
        assert submission.reachable == editor.reachable == reachable_node_ids(graph) == {"start", "end"}

    def test_reference_check_errors_are_appended(self):
        graph = _graph(scene("start", is_ending=True))
        report = validate_graph(graph, reference_check=lambda g: [f"Node {g.nodes[0].id} references a missing image file."])
        assert report.errors == ["Node start references a missing image file."]


class TestRepair:
    def test_linking_an_unreachable_node_removes_its_error(self):
        raw = draft(
            scene("start", buttons=("end",)),
            scene("end", is_ending=True),
            scene("side", buttons=("end",)),
        )
        before = validate_graph(normalize_payload(raw))
        assert "Node side is unreachable from the start node." in before.errors

        raw["nodes"][0]["buttons"].append({"id": "start-side", "text": "Detour", "targetNodeId": "side"})
        after = validate_graph(normalize_payload(raw))
        assert "Node side is unreachable from the start node." not in after.errors
        assert after.ok


@st.composite
def valid_graphs(draw):
    """Graphs satisfying every structural rule: a spanning path plus random extra edges."""
    size = draw(st.integers(min_value=1, max_value=8))
    ids = [f"n{index}" for index in range(size)]
    ending_index = draw(st.integers(min_value=0, max_value=size - 1))
    extra_endings = draw(st.sets(st.sampled_from(ids), max_size=size))
    nodes = []
    for index, node_id in enumerate(ids):
        targets = []
        if index + 1 < size:
            targets.append(ids[index + 1])
        targets.extend(draw(st.lists(st.sampled_from(ids), max_size=3)))
        is_ending = index == ending_index or node_id in extra_endings or not targets
        nodes.append(
            SceneNode(
                id=node_id,
                order=index + 1,
                is_ending=is_ending,
                buttons=[
                    ChoiceButton(id=f"{node_id}-b{position}", target_node_id=target)
                    for position, target in enumerate(targets)
                ],
            )
        )
    return DraftGraph(comic_meta=ComicMeta(start_node_id=ids[0]), nodes=nodes)


@pytest.mark.property
class TestValidationProperties:
    @given(graph=valid_graphs())
    @settings(max_examples=150, deadline=None)
    def test_no_false_negatives_on_valid_graphs(self, graph):
        report = validate_graph(graph, policy=ValidationPolicy.SUBMISSION)
        assert report.errors == []
        assert report.reachable == {node.id for node in graph.nodes}

    @given(graph=valid_graphs())
    @settings(max_examples=50, deadline=None)
    def test_validation_is_deterministic(self, graph):
        assert validate_graph(graph).to_dict() == validate_graph(graph).to_dict()
