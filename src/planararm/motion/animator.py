"""
Per-move animators for joints and the gripper.

Both animators are constant-speed bang-bang controllers: they start the
motor in the direction of the shorter path, keep it running at a fixed
speed, and stop it once the error is inside the deadband or the target has
been crossed between two ticks. There is no easing.

``tick`` returns True while the animator needs more ticks.
"""

import math
from typing import Optional

from planararm.core.angles import box2d_angle_to_deg, deg_to_rad, shortest_rotation
from planararm.core.config import ControllerConfig
from planararm.core.exceptions import ActuatorError
from planararm.core.logging import get_logger
from planararm.kinematics.chain import Gripper, Joint
from planararm.motion.actuator import GripperActuator, RevoluteActuator

logger = get_logger(__name__)


class JointAnimator:
    """Moves one joint's motor to ``desired_angle`` (degrees, normalized)."""

    def __init__(
        self,
        joint: Joint,
        desired_angle: float,
        config: Optional[ControllerConfig] = None,
    ) -> None:
        self.joint = joint
        self.desired_angle = desired_angle
        self.config = config or ControllerConfig()
        self._direction = 0.0
        self._motor_started = False

    @property
    def motor_started(self) -> bool:
        return self._motor_started

    def _actuator(self) -> RevoluteActuator:
        if self.joint.body is None:
            raise ActuatorError(f"Joint '{self.joint.id}' has no actuator", device=self.joint.id)
        return self.joint.body

    def tick(self, delta_seconds: float) -> bool:
        actuator = self._actuator()
        current = box2d_angle_to_deg(actuator.get_joint_angle())
        error = shortest_rotation(current, self.desired_angle)

        if not self._motor_started:
            if abs(error) < self.config.epsilon_deg:
                actuator.set_motor_speed(0.0)
                return False
            self._direction = math.copysign(1.0, error)
            speed = self._direction * self.config.speed_deg_per_sec
            actuator.set_max_motor_torque(self.config.max_motor_torque)
            actuator.enable_limit(False)
            actuator.set_motor_speed(deg_to_rad(speed))
            actuator.enable_motor(True)
            self._motor_started = True
            logger.debug(
                "joint_motor_started",
                joint=self.joint.id,
                current_deg=round(current, 3),
                target_deg=round(self.desired_angle, 3),
                speed_deg_per_sec=speed,
            )
            return True

        if abs(error) < self.config.epsilon_deg or error * self._direction < 0:
            actuator.set_motor_speed(0.0)
            logger.debug(
                "joint_move_finished",
                joint=self.joint.id,
                actual_deg=round(current, 3),
                target_deg=round(self.desired_angle, 3),
            )
            return False
        return True

    def stop(self) -> None:
        """Cut the motor immediately."""
        if self.joint.body is not None:
            self.joint.body.set_motor_speed(0.0)


class GripperAnimator:
    """Opens or closes the claw to ``open_percentage``."""

    def __init__(
        self,
        gripper: Gripper,
        open_percentage: float,
        config: Optional[ControllerConfig] = None,
    ) -> None:
        self.gripper = gripper
        self.open_percentage = open_percentage
        self.config = config or ControllerConfig()
        self._direction = 0.0
        self._finished = False

    def _actuator(self) -> GripperActuator:
        if self.gripper.body is None:
            raise ActuatorError(f"Gripper '{self.gripper.id}' has no actuator", device=self.gripper.id)
        return self.gripper.body

    def has_finished(self) -> bool:
        return self._finished

    def tick(self, delta_seconds: float) -> bool:
        if self._finished:
            return False
        actuator = self._actuator()
        error = self.open_percentage - actuator.get_open_percentage()

        if self._direction == 0.0:
            if abs(error) < self.config.claw_epsilon:
                return self._stop(actuator)
            self._direction = math.copysign(1.0, error)
            actuator.set_claw_speed(self._direction * self.config.claw_speed)
            return True

        if abs(error) < self.config.claw_epsilon or error * self._direction < 0:
            return self._stop(actuator)
        return True

    def emergency_stop(self) -> None:
        if self.gripper.body is not None:
            self.gripper.body.set_claw_speed(0.0)
        self._finished = True

    def _stop(self, actuator: GripperActuator) -> bool:
        actuator.set_claw_speed(0.0)
        self._finished = True
        return False
