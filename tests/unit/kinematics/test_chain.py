"""
Unit tests for the kinematics chain model.

Covers movement ranges (including bands that wrap through 0), chain
construction rules, forward kinematics and snapshot independence.
"""

import math

import numpy as np
import pytest

from planararm.core.exceptions import ChainStructureError, ConfigurationError
from planararm.kinematics.chain import (
    Bone,
    Gripper,
    Joint,
    KinematicsChain,
    MovementRange,
    NodeKind,
)


class TestMovementRange:
    """Tests for MovementRange."""

    def test_unrestricted(self):
        """Test the default range allows everything."""
        movement_range = MovementRange()
        assert movement_range.is_unrestricted
        assert movement_range.is_in_range(-720.0)
        assert movement_range.clamp(725.0) == pytest.approx(5.0)

    def test_plain_range(self):
        """Test a range that does not wrap."""
        movement_range = MovementRange(10.0, 200.0)
        assert movement_range.is_in_range(10.0)
        assert movement_range.is_in_range(200.0)
        assert not movement_range.is_in_range(5.0)
        assert not movement_range.is_in_range(201.0)

    def test_wrapping_range(self):
        """Test a band through 0 degrees."""
        movement_range = MovementRange(270.0, 90.0)
        assert movement_range.is_in_range(0.0)
        assert movement_range.is_in_range(300.0)
        assert movement_range.is_in_range(-30.0)
        assert movement_range.is_in_range(90.0)
        assert not movement_range.is_in_range(180.0)
        assert not movement_range.is_in_range(91.0)

    @pytest.mark.parametrize(
        "lo, hi",
        [(270, 90), (10, 200), (350, 10), (90, 90), (300, 0), (0, 45), (180, 179)],
    )
    def test_matches_arc_membership(self, lo, hi):
        """Test is_in_range against the explicit set of whole degrees on the arc."""
        movement_range = MovementRange(lo, hi)
        span = (hi - lo) % 360
        allowed = {(lo + k) % 360 for k in range(span + 1)}
        for angle in range(360):
            assert movement_range.is_in_range(angle) == (angle in allowed), angle

    def test_clamp_to_nearest_bound(self):
        """Test clamping picks the circularly nearest bound."""
        movement_range = MovementRange(270.0, 90.0)
        assert movement_range.clamp(100.0) == pytest.approx(90.0)
        assert movement_range.clamp(260.0) == pytest.approx(270.0)
        assert movement_range.clamp(45.0) == pytest.approx(45.0)

    def test_clamp_tie_prefers_min(self):
        """Test an angle equidistant from both bounds goes to the minimum."""
        assert MovementRange(270.0, 90.0).clamp(180.0) == pytest.approx(270.0)

    def test_invalid_bounds(self):
        """Test bounds outside [0, 360] are rejected."""
        with pytest.raises(ConfigurationError):
            MovementRange(-10.0, 90.0)
        with pytest.raises(ConfigurationError):
            MovementRange(0.0, 400.0)

    def test_equality(self):
        """Test value equality."""
        assert MovementRange(270.0, 90.0) == MovementRange(270, 90)
        assert MovementRange(270.0, 90.0) != MovementRange(0.0, 90.0)

    def test_hashable(self):
        """Test equal ranges hash alike and can key sets and dicts."""
        assert hash(MovementRange(270.0, 90.0)) == hash(MovementRange(270, 90))
        assert len({MovementRange(270.0, 90.0), MovementRange(270, 90), MovementRange()}) == 2


class TestNodes:
    """Tests for joints, bones and grippers."""

    def test_joint_orientation_normalized(self):
        """Test joint orientation always lies in [0, 360)."""
        joint = Joint("j", -90.0)
        assert joint.orientation_degrees == pytest.approx(270.0)
        joint.orientation_degrees = 370.0
        assert joint.orientation_degrees == pytest.approx(10.0)

    def test_bone_length_positive(self):
        """Test zero-length bones are rejected."""
        with pytest.raises(ChainStructureError):
            Bone("b", "j0", None, 0.0)

    def test_bone_length_read_only(self):
        """Test a bone's length cannot be reassigned."""
        bone = Bone("b", "j0", None, 1.0)
        with pytest.raises(AttributeError):
            bone.length = 2.0

    def test_kinds(self):
        """Test each node reports its kind."""
        assert Joint("j").kind is NodeKind.JOINT
        assert Bone("b", "j", None, 1.0).kind is NodeKind.BONE
        assert Gripper("g", "j", 0.3, 0.4, 0.3).kind is NodeKind.GRIPPER

    def test_gripper_claw_gap(self):
        """Test claw gap follows the opening."""
        gripper = Gripper("g", "j", 0.3, 0.4, 0.3)
        gripper.open_percentage = 0.5
        assert gripper.claw_gap == pytest.approx(0.2)

    def test_joint_copy_drops_body(self):
        """Test copies never share actuator handles."""
        joint = Joint("j", 30.0, MovementRange(0.0, 90.0))
        joint.body = object()
        clone = joint.copy()
        assert clone.body is None
        assert clone.range == joint.range
        assert clone.range is not joint.range


class TestChainConstruction:
    """Tests for building chains."""

    def test_order(self, three_link_chain):
        """Test bones and joints come out in chain order."""
        assert [b.id for b in three_link_chain.bones] == ["b0", "b1", "b2"]
        assert [j.id for j in three_link_chain.joints] == ["j0", "j1", "j2"]
        assert three_link_chain.root_joint.id == "j0"
        assert three_link_chain.end_bone.id == "b2"
        assert len(three_link_chain) == 6

    def test_links_are_ids(self, three_link_chain):
        """Test joints and bones reference each other by id."""
        j1 = three_link_chain.get_joint("j1")
        assert j1.predecessor == "b0"
        assert j1.successor == "b1"
        assert three_link_chain.get_bone("b1").joint_a == "j1"

    def test_iter_nodes_alternates(self, three_link_chain):
        """Test node iteration walks joint, bone, joint, bone..."""
        kinds = [node.kind for node in three_link_chain.iter_nodes()]
        assert kinds == [NodeKind.JOINT, NodeKind.BONE] * 3

    def test_duplicate_joint(self):
        """Test duplicate joint ids are rejected."""
        chain = KinematicsChain()
        chain.add_joint("j0")
        with pytest.raises(ChainStructureError):
            chain.add_joint("j0")

    def test_unknown_joint(self):
        """Test bones must attach to known joints."""
        chain = KinematicsChain()
        with pytest.raises(ChainStructureError):
            chain.add_bone("b0", "missing", None, 1.0)

    def test_branching_rejected(self):
        """Test a joint cannot drive two bones."""
        chain = KinematicsChain()
        j0 = chain.add_joint("j0")
        chain.add_bone("b0", j0, None, 1.0)
        with pytest.raises(ChainStructureError):
            chain.add_bone("b1", j0, None, 1.0)

    def test_multiple_roots(self):
        """Test a chain with two roots is malformed."""
        chain = KinematicsChain()
        chain.add_joint("a")
        chain.add_joint("b")
        with pytest.raises(ChainStructureError) as exc_info:
            chain.root_joint
        assert sorted(exc_info.value.details["roots"]) == ["a", "b"]

    def test_unreachable_bone(self):
        """Test a bone not connected to the root is reported."""
        chain = KinematicsChain()
        j0 = chain.add_joint("j0")
        j1 = chain.add_joint("j1")
        chain.add_bone("b0", j0, None, 1.0)
        chain.add_bone("b_loose", j1, None, 1.0)
        with pytest.raises(ChainStructureError):
            chain.bones

    def test_empty_chain_has_no_end(self):
        """Test a chain without bones has no end effector."""
        chain = KinematicsChain()
        chain.add_joint("j0")
        with pytest.raises(ChainStructureError):
            chain.end_effector


class TestForwardKinematics:
    """Tests for forward kinematics."""

    def test_straight(self, three_link_chain):
        """Test all-zero orientations lay the chain along +x."""
        np.testing.assert_allclose(three_link_chain.end_effector, [3.0, 0.0], atol=1e-12)
        assert three_link_chain.total_length == pytest.approx(3.0)

    def test_relative_orientations(self, three_link_chain):
        """Test orientations accumulate along the chain."""
        three_link_chain.get_joint("j1").orientation_degrees = 90.0
        three_link_chain.get_joint("j2").orientation_degrees = 90.0
        three_link_chain.apply_forward_kinematics()

        np.testing.assert_allclose(three_link_chain.get_joint("j1").position, [1.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(three_link_chain.get_joint("j2").position, [1.0, 1.0], atol=1e-12)
        np.testing.assert_allclose(three_link_chain.end_effector, [0.0, 1.0], atol=1e-12)
        assert three_link_chain.bone_heading("b2") == pytest.approx(180.0)

    def test_idempotent(self, three_link_chain):
        """Test repeated passes with unchanged orientations give the same endpoints."""
        three_link_chain.get_joint("j1").orientation_degrees = 37.0
        three_link_chain.apply_forward_kinematics()
        first = [(b.start.copy(), b.end.copy()) for b in three_link_chain.bones]
        three_link_chain.apply_forward_kinematics()
        for (start, end), bone in zip(first, three_link_chain.bones):
            np.testing.assert_array_equal(bone.start, start)
            np.testing.assert_array_equal(bone.end, end)
            assert np.linalg.norm(bone.end - bone.start) == pytest.approx(bone.length)

    def test_root_position_kept(self, three_link_chain):
        """Test the root joint anchors the chain."""
        three_link_chain.root_joint.position[:] = (0.0, 0.5)
        three_link_chain.get_joint("j0").orientation_degrees = 90.0
        three_link_chain.apply_forward_kinematics()
        np.testing.assert_allclose(three_link_chain.end_effector, [0.0, 3.5], atol=1e-12)

    def test_unknown_bone_heading(self, three_link_chain):
        """Test heading of an unknown bone."""
        with pytest.raises(ChainStructureError):
            three_link_chain.bone_heading("nope")


class TestSnapshots:
    """Tests for create_copy and sync_with_actuators."""

    def test_copy_is_independent(self, three_link_chain):
        """Test mutating a copy leaves the original untouched."""
        snapshot = three_link_chain.create_copy()
        snapshot.get_joint("j0").orientation_degrees = 90.0
        snapshot.apply_forward_kinematics()

        np.testing.assert_allclose(three_link_chain.end_effector, [3.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(snapshot.end_effector, [0.0, 3.0], atol=1e-12)
        assert [b.id for b in snapshot.bones] == ["b0", "b1", "b2"]

    def test_sync_reads_actuators(self, three_link_chain):
        """Test actuator angles (radians) flow back into the chain."""

        class FakeActuator:
            def __init__(self, angle):
                self.angle = angle

            def get_joint_angle(self):
                return self.angle

        three_link_chain.get_joint("j0").body = FakeActuator(-math.pi / 2)
        three_link_chain.sync_with_actuators()

        assert three_link_chain.get_joint("j0").orientation_degrees == pytest.approx(270.0)
        np.testing.assert_allclose(three_link_chain.end_effector, [0.0, -3.0], atol=1e-9)

    def test_sync_without_actuators(self, three_link_chain):
        """Test sync on a detached chain only re-runs forward kinematics."""
        three_link_chain.sync_with_actuators()
        np.testing.assert_allclose(three_link_chain.end_effector, [3.0, 0.0], atol=1e-12)
