"""
Kinematic simulation environment for planar arms.

This module stands in for the physics layer: it owns one actuator per
joint (and one for the gripper), integrates commanded motor speeds with a
fixed time step, and lets the arm pull the resulting angles back into its
kinematic model. Motors reach their commanded speed instantly; there are no
masses, contacts or gravity.
"""

from typing import TYPE_CHECKING, Optional

from planararm.core.angles import deg_to_rad
from planararm.core.logging import get_logger
from planararm.kinematics.chain import NodeKind

if TYPE_CHECKING:
    from planararm.arm import RobotArm

logger = get_logger(__name__)


class SimulatedRevoluteActuator:
    """Revolute motor whose angle follows the commanded speed exactly."""

    def __init__(
        self,
        name: str,
        angle: float = 0.0,
        lower_limit: float = deg_to_rad(-270.0),
        upper_limit: float = deg_to_rad(90.0),
    ) -> None:
        self.name = name
        self.angle = angle
        self.lower_limit = lower_limit
        self.upper_limit = upper_limit
        self.motor_speed = 0.0
        self.max_motor_torque = 0.0
        self.motor_enabled = True
        self.limit_enabled = False

    def get_joint_angle(self) -> float:
        return self.angle

    def set_motor_speed(self, radians_per_second: float) -> None:
        self.motor_speed = radians_per_second

    def set_max_motor_torque(self, torque: float) -> None:
        self.max_motor_torque = torque

    def enable_motor(self, enabled: bool) -> None:
        self.motor_enabled = enabled

    def enable_limit(self, enabled: bool) -> None:
        self.limit_enabled = enabled

    def step(self, dt: float) -> None:
        if not self.motor_enabled:
            return
        self.angle += self.motor_speed * dt
        if self.limit_enabled:
            self.angle = min(max(self.angle, self.lower_limit), self.upper_limit)


class SimulatedGripperActuator:
    """Claw motor; the opening is clamped to ``[0, 1]``."""

    def __init__(self, name: str, open_percentage: float = 1.0) -> None:
        self.name = name
        self.open_percentage = open_percentage
        self.claw_speed = 0.0

    def get_open_percentage(self) -> float:
        return self.open_percentage

    def set_claw_speed(self, fraction_per_second: float) -> None:
        self.claw_speed = fraction_per_second

    def step(self, dt: float) -> None:
        self.open_percentage = min(max(self.open_percentage + self.claw_speed * dt, 0.0), 1.0)


class SimulationEnvironment:
    """
    Fixed time step driver for simulated actuators.

    Example:
        >>> with SimulationEnvironment() as env:
        ...     env.add_arm(arm)
        ...     arm.move_arm((1.5, 0.3), on_done)
        ...     env.run_until_idle(arm)
    """

    def __init__(self, time_step: float = 1.0 / 60.0, max_frame_time: float = 0.25):
        """
        Initialize simulation environment.

        Args:
            time_step: Integration step in seconds
            max_frame_time: Upper bound on the time consumed per tick, so a
                slow caller cannot queue up an unbounded number of steps
        """
        self.time_step = time_step
        self.max_frame_time = max_frame_time
        self.is_running = False
        self.elapsed = 0.0
        self._accumulator = 0.0
        self._joint_actuators: dict[str, SimulatedRevoluteActuator] = {}
        self._gripper_actuators: dict[str, SimulatedGripperActuator] = {}

    def start(self) -> None:
        if self.is_running:
            raise RuntimeError("Simulation already running")
        self.is_running = True

    def stop(self) -> None:
        self.is_running = False
        self._accumulator = 0.0

    def add_arm(self, arm: "RobotArm") -> None:
        """
        Attach simulated actuators to every joint and gripper of ``arm``.

        Each actuator starts at the joint's current orientation.
        """
        for node in arm.chain.iter_nodes():
            if node.kind is NodeKind.JOINT:
                actuator = SimulatedRevoluteActuator(node.id, deg_to_rad(node.orientation_degrees))
                node.body = actuator
                self._joint_actuators[node.id] = actuator
            elif node.kind is NodeKind.GRIPPER:
                gripper_actuator = SimulatedGripperActuator(node.id, node.open_percentage)
                node.body = gripper_actuator
                self._gripper_actuators[node.id] = gripper_actuator
            elif node.kind is NodeKind.BONE:
                pass
        arm.chain.sync_with_actuators()
        logger.info(
            "arm_attached",
            joints=len(self._joint_actuators),
            grippers=len(self._gripper_actuators),
        )

    def joint_actuator(self, joint_id: str) -> SimulatedRevoluteActuator:
        return self._joint_actuators[joint_id]

    def gripper_actuator(self, gripper_id: str) -> SimulatedGripperActuator:
        return self._gripper_actuators[gripper_id]

    def step(self) -> None:
        """Advance every actuator by one time step."""
        if not self.is_running:
            raise RuntimeError("Simulation not running")
        for actuator in self._joint_actuators.values():
            actuator.step(self.time_step)
        for gripper in self._gripper_actuators.values():
            gripper.step(self.time_step)
        self.elapsed += self.time_step

    def tick(self, delta_seconds: float) -> int:
        """
        Consume ``delta_seconds`` of wall time in fixed steps.

        Returns:
            Number of steps taken
        """
        self._accumulator += min(delta_seconds, self.max_frame_time)
        steps = 0
        # tolerance keeps float drift from dropping a step when dt == time_step
        while self._accumulator >= self.time_step - 1e-12:
            self.step()
            self._accumulator -= self.time_step
            steps += 1
        return steps

    def run_until_idle(
        self,
        arm: "RobotArm",
        delta_seconds: Optional[float] = None,
        max_seconds: float = 120.0,
    ) -> bool:
        """
        Tick the arm and the simulation until the arm has finished moving.

        Returns:
            True if the arm came to rest within ``max_seconds`` of simulated time
        """
        dt = delta_seconds or self.time_step
        simulated = 0.0
        while simulated < max_seconds:
            arm.tick(dt)
            if arm.has_finished_moving():
                return True
            self.tick(dt)
            simulated += dt
        logger.warning("arm_not_idle", max_seconds=max_seconds)
        return False

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
