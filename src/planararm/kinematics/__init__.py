"""
Kinematics module - Chain model, constraint validators and the CCD solver.
"""

from planararm.kinematics.ccd import CCDSolver, CompletionCallback, Outcome
from planararm.kinematics.chain import (
    Bone,
    Gripper,
    Joint,
    KinematicsChain,
    MovementRange,
    NodeKind,
)
from planararm.kinematics.validation import (
    AlwaysValidValidator,
    ApproachAngleValidator,
    CompositeValidator,
    ConstraintValidator,
    GroundPlaneValidator,
    default_validator,
)

__all__ = [
    "Bone",
    "Gripper",
    "Joint",
    "KinematicsChain",
    "MovementRange",
    "NodeKind",
    "CCDSolver",
    "CompletionCallback",
    "Outcome",
    "AlwaysValidValidator",
    "ApproachAngleValidator",
    "CompositeValidator",
    "ConstraintValidator",
    "GroundPlaneValidator",
    "default_validator",
]
