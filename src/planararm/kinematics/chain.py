"""
Kinematic chain data model and forward kinematics.

A chain is an ordered linkage rooted at exactly one joint::

    joint_0 --bone_0--> joint_1 --bone_1--> joint_2 --gripper--> (free end)

The chain owns every node. Links between nodes are plain identifiers
(``Joint.predecessor``/``Joint.successor`` name bones, ``Bone.joint_a``/
``Bone.joint_b`` name joints), so a snapshot can be copied node by node
without walking object graphs.

Joint orientations are relative to the heading of the predecessor bone
(the root joint is relative to +x), which is what a revolute actuator
measures. Forward kinematics accumulates them into world headings.
"""

from enum import Enum
from typing import Any, Iterator, Optional, Union

import numpy as np

from planararm.core.angles import (
    angular_distance,
    box2d_angle_to_deg,
    direction,
    normalize_deg,
)
from planararm.core.exceptions import ChainStructureError, ConfigurationError


class NodeKind(Enum):
    """Closed set of node kinds in a chain."""

    JOINT = "joint"
    BONE = "bone"
    GRIPPER = "gripper"


class MovementRange:
    """
    Inclusive band of allowed joint angles in degrees.

    When ``min_angle > max_angle`` the band wraps through 0, e.g.
    ``MovementRange(270, 90)`` allows 270..360 and 0..90.
    """

    def __init__(self, min_angle: float = 0.0, max_angle: float = 360.0) -> None:
        for value in (min_angle, max_angle):
            if value < 0.0 or value > 360.0:
                raise ConfigurationError(
                    "Movement range bounds must be within [0, 360]",
                    details={"min": min_angle, "max": max_angle},
                )
        self.min_angle = float(min_angle)
        self.max_angle = float(max_angle)

    @classmethod
    def unrestricted(cls) -> "MovementRange":
        return cls(0.0, 360.0)

    @property
    def is_unrestricted(self) -> bool:
        return self.min_angle == 0.0 and self.max_angle == 360.0

    def is_in_range(self, angle: float) -> bool:
        """Check whether ``angle`` (any value, normalized first) is allowed."""
        if self.is_unrestricted:
            return True
        a = normalize_deg(angle)
        lo = normalize_deg(self.min_angle)
        hi = normalize_deg(self.max_angle)
        if lo <= hi:
            return lo <= a <= hi
        return a >= lo or a <= hi

    def clamp(self, angle: float) -> float:
        """Return ``angle`` normalized, or the circularly nearest bound if outside."""
        a = normalize_deg(angle)
        if self.is_in_range(a):
            return a
        lo = normalize_deg(self.min_angle)
        hi = normalize_deg(self.max_angle)
        if angular_distance(a, lo) <= angular_distance(a, hi):
            return lo
        return hi

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MovementRange):
            return NotImplemented
        return (self.min_angle, self.max_angle) == (other.min_angle, other.max_angle)

    def __hash__(self) -> int:
        return hash((self.min_angle, self.max_angle))

    def __repr__(self) -> str:
        return f"MovementRange({self.min_angle:g}, {self.max_angle:g})"


class Joint:
    """A rotational joint; ``body`` is the actuator handle, if any."""

    kind = NodeKind.JOINT

    def __init__(
        self,
        joint_id: str,
        orientation_degrees: float = 0.0,
        movement_range: Optional[MovementRange] = None,
    ) -> None:
        self.id = joint_id
        self._orientation = normalize_deg(orientation_degrees)
        self.position = np.zeros(2)
        self.range = movement_range or MovementRange.unrestricted()
        self.predecessor: Optional[str] = None
        self.successor: Optional[str] = None
        self.body: Any = None

    @property
    def orientation_degrees(self) -> float:
        return self._orientation

    @orientation_degrees.setter
    def orientation_degrees(self, value: float) -> None:
        self._orientation = normalize_deg(value)

    def copy(self) -> "Joint":
        clone = Joint(self.id, self._orientation, MovementRange(self.range.min_angle, self.range.max_angle))
        clone.position = self.position.copy()
        clone.predecessor = self.predecessor
        clone.successor = self.successor
        return clone

    def __repr__(self) -> str:
        return f"Joint({self.id!r}, {self._orientation:.2f} deg)"


class Bone:
    """A rigid segment of fixed length starting at ``joint_a``."""

    kind = NodeKind.BONE

    def __init__(self, bone_id: str, joint_a: str, joint_b: Optional[str], length: float) -> None:
        if length <= 0:
            raise ChainStructureError(
                f"Bone '{bone_id}' must have a positive length", details={"length": length}
            )
        self.id = bone_id
        self.joint_a = joint_a
        self.joint_b = joint_b
        self._length = float(length)
        self.start = np.zeros(2)
        self.end = np.zeros(2)
        self.body: Any = None

    @property
    def length(self) -> float:
        return self._length

    def copy(self) -> "Bone":
        clone = Bone(self.id, self.joint_a, self.joint_b, self._length)
        clone.start = self.start.copy()
        clone.end = self.end.copy()
        return clone

    def __repr__(self) -> str:
        return f"Bone({self.id!r}, length={self._length:g})"


class Gripper(Bone):
    """
    Terminal bone carrying a two-claw gripper.

    ``open_percentage`` is 0 for closed and 1 for fully open.
    """

    kind = NodeKind.GRIPPER

    def __init__(
        self,
        bone_id: str,
        joint_a: str,
        length: float,
        base_plate_length: float,
        claw_length: float,
    ) -> None:
        super().__init__(bone_id, joint_a, None, length)
        self.base_plate_length = base_plate_length
        self.claw_length = claw_length
        self.open_percentage = 1.0

    @property
    def claw_gap(self) -> float:
        return self.base_plate_length * self.open_percentage

    def copy(self) -> "Gripper":
        clone = Gripper(self.id, self.joint_a, self.length, self.base_plate_length, self.claw_length)
        clone.start = self.start.copy()
        clone.end = self.end.copy()
        clone.open_percentage = self.open_percentage
        return clone


Node = Union[Joint, Bone, Gripper]


class KinematicsChain:
    """
    Ordered graph of joints and bones with forward kinematics.

    Example:
        >>> chain = KinematicsChain()
        >>> j0 = chain.add_joint("j0")
        >>> j1 = chain.add_joint("j1")
        >>> _ = chain.add_bone("b0", j0, j1, 1.0)
        >>> _ = chain.add_bone("b1", j1, None, 1.0)
        >>> chain.apply_forward_kinematics()
        >>> chain.end_effector
        array([2., 0.])
    """

    def __init__(self) -> None:
        self._joints: dict[str, Joint] = {}
        self._bones: dict[str, Bone] = {}

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_joint(
        self,
        joint_id: str,
        initial_angle: float = 0.0,
        movement_range: Optional[MovementRange] = None,
    ) -> Joint:
        if joint_id in self._joints:
            raise ChainStructureError(f"Duplicate joint id: {joint_id}")
        joint = Joint(joint_id, initial_angle, movement_range)
        self._joints[joint_id] = joint
        return joint

    def add_bone(
        self,
        bone_id: str,
        joint_a: Union[Joint, str],
        joint_b: Union[Joint, str, None],
        length: float,
    ) -> Bone:
        a_id = self._joint_id(joint_a)
        b_id = self._joint_id(joint_b) if joint_b is not None else None
        return self._link(Bone(bone_id, a_id, b_id, length))

    def add_gripper(
        self,
        bone_id: str,
        joint_a: Union[Joint, str],
        length: float,
        base_plate_length: float,
        claw_length: float,
    ) -> Gripper:
        gripper = Gripper(bone_id, self._joint_id(joint_a), length, base_plate_length, claw_length)
        return self._link(gripper)

    def _joint_id(self, joint: Union[Joint, str]) -> str:
        joint_id = joint.id if isinstance(joint, Joint) else joint
        if joint_id not in self._joints:
            raise ChainStructureError(f"Unknown joint: {joint_id}")
        return joint_id

    def _link(self, bone: Bone) -> Any:
        if bone.id in self._bones:
            raise ChainStructureError(f"Duplicate bone id: {bone.id}")
        joint_a = self._joints[bone.joint_a]
        if joint_a.successor is not None:
            raise ChainStructureError(
                f"Joint '{joint_a.id}' already drives bone '{joint_a.successor}'",
                details={"bone": bone.id},
            )
        if bone.joint_b is not None:
            joint_b = self._joints[bone.joint_b]
            if joint_b.predecessor is not None:
                raise ChainStructureError(
                    f"Joint '{joint_b.id}' is already attached to bone '{joint_b.predecessor}'",
                    details={"bone": bone.id},
                )
            joint_b.predecessor = bone.id
        joint_a.successor = bone.id
        self._bones[bone.id] = bone
        return bone

    # ------------------------------------------------------------------
    # Structure queries
    # ------------------------------------------------------------------

    @property
    def root_joint(self) -> Joint:
        roots = [j for j in self._joints.values() if j.predecessor is None]
        if len(roots) != 1:
            raise ChainStructureError(
                f"Expected exactly one root joint, found {len(roots)}",
                details={"roots": [j.id for j in roots]},
            )
        return roots[0]

    def _ordered_bones(self) -> list[Bone]:
        ordered: list[Bone] = []
        seen: set[str] = set()
        bone_id = self.root_joint.successor
        while bone_id is not None:
            if bone_id in seen:
                raise ChainStructureError(f"Cycle detected at bone '{bone_id}'")
            seen.add(bone_id)
            bone = self._bones[bone_id]
            ordered.append(bone)
            bone_id = self._joints[bone.joint_b].successor if bone.joint_b is not None else None
        if len(ordered) != len(self._bones):
            orphans = sorted(set(self._bones) - seen)
            raise ChainStructureError(
                f"Found no successor for bone '{ordered[-1].id if ordered else None}'",
                details={"unreachable": orphans},
            )
        return ordered

    @property
    def bones(self) -> list[Bone]:
        """Bones in chain order, root to end."""
        return self._ordered_bones()

    @property
    def joints(self) -> list[Joint]:
        """Joints in chain order, root to end."""
        ordered = [self.root_joint]
        for bone in self._ordered_bones():
            if bone.joint_b is not None:
                ordered.append(self._joints[bone.joint_b])
        return ordered

    @property
    def end_bone(self) -> Bone:
        bones = self._ordered_bones()
        if not bones:
            raise ChainStructureError("Chain has no bones")
        return bones[-1]

    @property
    def end_effector(self) -> np.ndarray:
        return self.end_bone.end.copy()

    @property
    def total_length(self) -> float:
        return sum(b.length for b in self._bones.values())

    def get_joint(self, joint_id: str) -> Joint:
        try:
            return self._joints[joint_id]
        except KeyError:
            raise ChainStructureError(f"Unknown joint: {joint_id}") from None

    def get_bone(self, bone_id: str) -> Bone:
        try:
            return self._bones[bone_id]
        except KeyError:
            raise ChainStructureError(f"Unknown bone: {bone_id}") from None

    def iter_nodes(self) -> Iterator[Node]:
        """Yield joint, bone, joint, bone, ... from the root to the free end."""
        yield self.root_joint
        for bone in self._ordered_bones():
            yield bone
            if bone.joint_b is not None:
                yield self._joints[bone.joint_b]

    def bone_heading(self, bone_id: str) -> float:
        """Accumulated world heading of a bone in degrees."""
        heading = 0.0
        for bone in self._ordered_bones():
            heading = normalize_deg(heading + self._joints[bone.joint_a].orientation_degrees)
            if bone.id == bone_id:
                return heading
        raise ChainStructureError(f"Unknown bone: {bone_id}")

    def __len__(self) -> int:
        return len(self._joints) + len(self._bones)

    # ------------------------------------------------------------------
    # Kinematics
    # ------------------------------------------------------------------

    def apply_forward_kinematics(self) -> None:
        """
        Recompute every bone's endpoints and every joint's position.

        The root joint keeps its position; everything distal to it follows
        from orientations and bone lengths.

        Raises:
            ChainStructureError: If the chain has several roots or a broken link
        """
        heading = 0.0
        for bone in self._ordered_bones():
            joint_a = self._joints[bone.joint_a]
            heading = normalize_deg(heading + joint_a.orientation_degrees)
            bone.start = joint_a.position.copy()
            bone.end = bone.start + bone.length * direction(heading)
            if bone.joint_b is not None:
                self._joints[bone.joint_b].position = bone.end.copy()

    def create_copy(self) -> "KinematicsChain":
        """Independent snapshot with the same ids, positions and orientations."""
        clone = KinematicsChain()
        for joint_id, joint in self._joints.items():
            clone._joints[joint_id] = joint.copy()
        for bone_id, bone in self._bones.items():
            clone._bones[bone_id] = bone.copy()
        return clone

    def sync_with_actuators(self) -> None:
        """
        Pull live actuator state back into the model.

        Joints and grippers without an actuator are left as they are, so a
        chain that was never attached to a simulation makes this a no-op
        apart from re-running forward kinematics.
        """
        for joint in self._joints.values():
            if joint.body is not None:
                joint.orientation_degrees = box2d_angle_to_deg(joint.body.get_joint_angle())
        for bone in self._bones.values():
            if bone.kind is NodeKind.GRIPPER and bone.body is not None:
                bone.open_percentage = bone.body.get_open_percentage()
        self.apply_forward_kinematics()
