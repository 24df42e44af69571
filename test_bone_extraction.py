#!/usr/bin/env python3
"""
Unit tests for bone extraction and summaries.
Run with: python -m pytest test_bone_extraction.py -v
Or: python test_bone_extraction.py
"""

import json
import unittest

from avatar_mapper.bone_extraction import bone_identity_key, extract_bones, iter_scene_nodes
from avatar_mapper.bone_summary import summarize_bones, summarize_extraction, summarize_nodes
from avatar_mapper.scene_graph import InvalidSceneError, SceneGraph, SceneNode, Skeleton


def build_rig_scene():
    """
    Scene
      Armature
        Hips (bone)
          Spine (bone)
            Head (bone)
          <unnamed bone>
      Body (mesh, skinned to Hips, Spine, Head, LeftHand, <unnamed>)
    LeftHand is only reachable through the skin.
    """
    head = SceneNode(name="Head", is_bone=True, uuid="n-head")
    spine = SceneNode(name="Spine", is_bone=True, uuid="n-spine", children=[head])
    unnamed = SceneNode(name="", is_bone=True, uuid="n-unnamed")
    hips = SceneNode(name="Hips", is_bone=True, uuid="n-hips", children=[spine, unnamed])
    armature = SceneNode(name="Armature", uuid="n-armature", children=[hips])
    left_hand = SceneNode(name="LeftHand", is_bone=True, uuid="n-lhand")
    body = SceneNode(name="Body", uuid="n-body", is_mesh=True,
                     skeleton=Skeleton(bones=[hips, spine, head, left_hand, unnamed, None]))
    root = SceneNode(name="Scene", uuid="scene-0", children=[armature, body])
    return SceneGraph(scene=root, scenes=[root], source="rig")


class TestExtractBones(unittest.TestCase):
    """Test cases for extract_bones."""

    def setUp(self):
        self.graph = build_rig_scene()

    def test_nodes_in_traversal_order(self):
        """Named nodes are collected in pre-order; unnamed ones are skipped."""
        result = extract_bones(self.graph)
        self.assertEqual([n.name for n in result.nodes],
                         ["Scene", "Armature", "Hips", "Spine", "Head", "Body"])

    def test_bones_from_graph_and_skin(self):
        """Bones come from bone nodes and skin joints, each exactly once."""
        result = extract_bones(self.graph)
        self.assertEqual([b.name for b in result.bones], ["Hips", "Spine", "Head", "LeftHand"])

    def test_unnamed_bones_excluded(self):
        """Empty-named bones never appear in bones or nodes."""
        result = extract_bones(self.graph)
        self.assertTrue(all(b.name for b in result.bones))
        self.assertTrue(all(n.name for n in result.nodes))

    def test_idempotent(self):
        """Running extraction twice gives the same bones in the same order."""
        first = extract_bones(self.graph)
        second = extract_bones(self.graph)
        self.assertEqual([bone_identity_key(b) for b in first.bones],
                         [bone_identity_key(b) for b in second.bones])
        self.assertEqual([n.name for n in first.nodes], [n.name for n in second.nodes])

    def test_dedupe_by_uuid_keeps_same_named_bones(self):
        """Distinct bones sharing a name stay separate when they have distinct ids."""
        a = SceneNode(name="Finger", is_bone=True, uuid="a")
        b = SceneNode(name="Finger", is_bone=True, uuid="b")
        root = SceneNode(name="Root", children=[a, b])
        result = extract_bones(root)
        self.assertEqual(len(result.bones), 2)

    def test_dedupe_by_name_without_uuid(self):
        """Without ids, bones are identified by name; the first one wins."""
        graph_bone = SceneNode(name="Neck", is_bone=True)
        skin_copy = SceneNode(name="Neck", is_bone=True)
        mesh = SceneNode(name="Mesh", is_mesh=True, skeleton=Skeleton(bones=[skin_copy]))
        root = SceneNode(name="Root", children=[graph_bone, mesh])
        result = extract_bones(root)
        self.assertEqual(len(result.bones), 1)
        self.assertIs(result.bones[0], graph_bone)

    def test_skeleton_bones_appended_when_mesh_visited(self):
        """Skin-only bones are placed where their mesh is visited."""
        early = SceneNode(name="EarlyBone", is_bone=True, uuid="e")
        skin_only = SceneNode(name="SkinOnly", is_bone=True, uuid="s")
        mesh = SceneNode(name="Mesh", uuid="m", skeleton=Skeleton(bones=[skin_only]))
        late = SceneNode(name="LateBone", is_bone=True, uuid="l")
        root = SceneNode(name="Root", children=[early, mesh, late])
        result = extract_bones(root)
        self.assertEqual([b.name for b in result.bones], ["EarlyBone", "SkinOnly", "LateBone"])

    def test_shared_node_visited_once(self):
        """A node with two parents is only collected once."""
        shared = SceneNode(name="Shared", is_bone=True, uuid="shared")
        root = SceneNode(name="Root", children=[
            SceneNode(name="A", children=[shared]),
            SceneNode(name="B", children=[shared]),
        ])
        result = extract_bones(root)
        self.assertEqual([n.name for n in result.nodes], ["Root", "A", "Shared", "B"])
        self.assertEqual(len(result.bones), 1)

    def test_empty_scene(self):
        """A root with no named nodes gives empty lists, not an error."""
        root = SceneNode(name="", children=[SceneNode(name=""), SceneNode(name=None)])
        result = extract_bones(SceneGraph(scene=root))
        self.assertEqual(result.bones, [])
        self.assertEqual(result.nodes, [])

    def test_falls_back_to_first_scene(self):
        """Without a default scene the first scene is traversed."""
        first = SceneNode(name="First")
        second = SceneNode(name="Second")
        result = extract_bones(SceneGraph(scene=None, scenes=[first, second]))
        self.assertEqual([n.name for n in result.nodes], ["First"])

    def test_missing_scene_raises(self):
        """No scene to traverse is an InvalidSceneError."""
        with self.assertRaises(InvalidSceneError):
            extract_bones(SceneGraph())
        with self.assertRaises(InvalidSceneError):
            extract_bones(None)

    def test_does_not_mutate_graph(self):
        """Extraction leaves the scene graph untouched."""
        root = self.graph.scene
        child_count = len(root.children)
        extract_bones(self.graph)
        self.assertEqual(len(root.children), child_count)
        self.assertEqual(len(list(iter_scene_nodes(root))), 7)


class TestSummaries(unittest.TestCase):
    """Test cases for bone and node summaries."""

    def test_summaries_preserve_order_and_length(self):
        """Summaries are 1:1 with their input and JSON-serializable."""
        result = extract_bones(build_rig_scene())
        bones = summarize_bones(result.bones)
        nodes = summarize_nodes(result.nodes)

        self.assertEqual(bones, [{'name': "Hips"}, {'name': "Spine"}, {'name': "Head"}, {'name': "LeftHand"}])
        self.assertEqual(len(nodes), len(result.nodes))
        self.assertEqual(nodes[0], {'name': "Scene", 'isBone': False})
        self.assertEqual(nodes[2], {'name': "Hips", 'isBone': True})

        summary = summarize_extraction(result)
        self.assertEqual(json.loads(json.dumps(summary)), summary)

    def test_empty_input(self):
        """Empty lists summarize to empty lists."""
        self.assertEqual(summarize_bones([]), [])
        self.assertEqual(summarize_nodes([]), [])


if __name__ == "__main__":
    unittest.main()
