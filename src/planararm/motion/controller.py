"""
Per-joint motion controller.

A controller owns a FIFO of pending move tasks and the animators currently
running for its joint. Each tick it starts the next task once no animator is
active, then advances the active animators and drops the finished ones::

    IDLE --add_task--> QUEUED --tick--> ACTIVE --animator done--> IDLE/QUEUED
      ^                                                             |
      +-------------------- emergency_stop (any state) -------------+
"""

from collections import deque
from enum import Enum
from typing import Callable, Optional

from planararm.core.angles import normalize_deg
from planararm.core.config import ControllerConfig
from planararm.core.logging import get_logger
from planararm.kinematics.chain import Joint
from planararm.motion.animator import JointAnimator

logger = get_logger(__name__)


class ControllerState(Enum):
    IDLE = "idle"
    QUEUED = "queued"
    ACTIVE = "active"


class JointController:
    """Queues and executes moves for a single joint."""

    def __init__(self, joint: Joint, config: Optional[ControllerConfig] = None) -> None:
        self.joint = joint
        self.config = config or ControllerConfig()
        self._tasks: deque[Callable[[], None]] = deque()
        self._animators: list[JointAnimator] = []

    @property
    def state(self) -> ControllerState:
        if self._animators:
            return ControllerState.ACTIVE
        if self._tasks:
            return ControllerState.QUEUED
        return ControllerState.IDLE

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    @property
    def active_animators(self) -> list[JointAnimator]:
        return list(self._animators)

    @property
    def is_moving(self) -> bool:
        return bool(self._tasks) or bool(self._animators)

    def add_task(self, desired_angle: float) -> None:
        """Queue a move of the joint to ``desired_angle`` degrees."""
        target = normalize_deg(desired_angle)
        logger.info(
            "joint_move_queued",
            joint=self.joint.id,
            from_deg=round(self.joint.orientation_degrees, 3),
            to_deg=round(target, 3),
        )

        def start() -> None:
            logger.debug(
                "joint_move_started",
                joint=self.joint.id,
                from_deg=round(self.joint.orientation_degrees, 3),
                to_deg=round(target, 3),
            )
            self._animators.append(JointAnimator(self.joint, target, self.config))

        self._tasks.append(start)

    def tick(self, delta_seconds: float) -> bool:
        if not self._animators and self._tasks:
            self._tasks.popleft()()
        self._animators = [a for a in self._animators if a.tick(delta_seconds)]
        return True

    def emergency_stop(self) -> None:
        self._tasks.clear()
        self._animators.clear()
        if self.joint.body is not None:
            self.joint.body.set_motor_speed(0.0)
