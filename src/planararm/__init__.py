"""
PlanarArm - constrained inverse kinematics and motion control for planar arms.

Positions a chain of bones and rotational joints so its end effector reaches
a target point, using a resumable cyclic coordinate descent solver gated by
constraint validators, then turns the solved pose into queued, interruptible
per-joint motor moves driven by a fixed-rate tick.
"""

__version__ = "0.1.0"
__author__ = "PlanarArm Contributors"

from planararm.arm import RobotArm
from planararm.core.config import ArmConfig, ConfigManager, default_arm_config
from planararm.kinematics.ccd import CCDSolver, Outcome

__all__ = [
    "__version__",
    "ArmConfig",
    "CCDSolver",
    "ConfigManager",
    "Outcome",
    "RobotArm",
    "default_arm_config",
]
