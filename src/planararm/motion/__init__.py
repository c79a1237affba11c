"""
Motion module - Joint and gripper animators and per-joint controllers.
"""

from planararm.motion.actuator import GripperActuator, RevoluteActuator
from planararm.motion.animator import GripperAnimator, JointAnimator
from planararm.motion.controller import ControllerState, JointController

__all__ = [
    "GripperActuator",
    "RevoluteActuator",
    "GripperAnimator",
    "JointAnimator",
    "ControllerState",
    "JointController",
]
