"""
Robot arm orchestration.

The arm owns the live kinematic chain, at most one CCD solve session, one
:class:`JointController` per joint and the gripper animator. Everything is
advanced from :meth:`RobotArm.tick`, called once per simulated frame, in
this order:

1. advance the solve session; on a terminal outcome dispatch the solved
   joint angles to the controllers and fire the completion callback
2. tick the gripper animator
3. tick every joint controller
4. pull the actuator angles back into the chain
"""

from typing import Optional, Sequence, Union

from planararm.core.config import ArmConfig, ControllerConfig, SolverConfig
from planararm.core.exceptions import ChainStructureError, MotionError
from planararm.core.logging import get_logger
from planararm.kinematics.ccd import CCDSolver, CompletionCallback, CompletionHandler, Outcome
from planararm.kinematics.chain import Gripper, Joint, KinematicsChain, MovementRange, NodeKind
from planararm.kinematics.validation import ConstraintValidator, default_validator
from planararm.motion.animator import GripperAnimator
from planararm.motion.controller import JointController

logger = get_logger(__name__)


class RobotArm:
    """
    Drives a planar arm towards target points.

    Args:
        chain: Live kinematics chain (already linked).
        validator: Constraint gate handed to every solve session.
        solver_config: Iteration budgets for solve sessions.
        controller_config: Motor settings for joint and gripper moves.
        approach_heading: Required end bone heading for solves, or None.
    """

    def __init__(
        self,
        chain: KinematicsChain,
        validator: Optional[ConstraintValidator] = None,
        solver_config: Optional[SolverConfig] = None,
        controller_config: Optional[ControllerConfig] = None,
        approach_heading: Optional[float] = None,
    ) -> None:
        self.chain = chain
        self.validator = validator or default_validator()
        self.solver_config = solver_config or SolverConfig()
        self.controller_config = controller_config or ControllerConfig()
        self.approach_heading = approach_heading

        self.chain.apply_forward_kinematics()
        self._controllers: dict[str, JointController] = {
            joint.id: JointController(joint, self.controller_config) for joint in chain.joints
        }
        self._solver: Optional[CCDSolver] = None
        self._gripper_animator: Optional[GripperAnimator] = None
        self.solve_time_secs = 0.0

    @classmethod
    def from_config(cls, config: ArmConfig) -> "RobotArm":
        """Build the chain described by ``config`` and wrap it in an arm."""
        chain = KinematicsChain()
        for joint_cfg in config.joints:
            movement_range = (
                MovementRange(joint_cfg.range.min, joint_cfg.range.max) if joint_cfg.range else None
            )
            chain.add_joint(joint_cfg.id, joint_cfg.initial_angle, movement_range)
        for bone_cfg in config.bones:
            chain.add_bone(bone_cfg.id, bone_cfg.joint_a, bone_cfg.joint_b, bone_cfg.length)
        if config.gripper is not None:
            g = config.gripper
            chain.add_gripper(g.id, g.joint_a, g.length, g.base_plate_length, g.claw_length)

        chain.root_joint.position[:] = config.base_position
        logger.info("arm_built", name=config.name, joints=len(config.joints), bones=len(config.bones))
        return cls(
            chain,
            validator=default_validator(config.constraints),
            solver_config=config.solver,
            controller_config=config.controller,
            approach_heading=config.constraints.approach_heading,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def current_solver(self) -> Optional[CCDSolver]:
        return self._solver

    @property
    def gripper(self) -> Optional[Gripper]:
        end_bone = self.chain.end_bone
        return end_bone if end_bone.kind is NodeKind.GRIPPER else None

    def controller(self, joint_id: str) -> JointController:
        try:
            return self._controllers[joint_id]
        except KeyError:
            raise ChainStructureError(f"Unknown joint: {joint_id}") from None

    @property
    def is_claw_moving(self) -> bool:
        return self._gripper_animator is not None

    def has_finished_moving(self) -> bool:
        return self._solver is None and not any(c.is_moving for c in self._controllers.values())

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def move_arm(self, target: Sequence[float], callback: Optional[CompletionHandler] = None) -> bool:
        """
        Start solving for ``target``.

        Returns:
            False if a solve or a motion is still in progress
        """
        if not self.has_finished_moving():
            logger.info("move_rejected_busy", target=list(target))
            return False

        self.chain.sync_with_actuators()
        self._solver = CCDSolver(
            self.chain.create_copy(),
            target,
            self.validator,
            completion=CompletionCallback(callback),
            config=self.solver_config,
            approach_heading=self.approach_heading,
        )
        self.solve_time_secs = 0.0
        logger.info("solve_started", target=list(target))
        return True

    def move_joint(self, joint: Union[Joint, str], angle_degrees: float) -> bool:
        """
        Queue a single joint move.

        Returns:
            False if busy, if the joint has no actuator, or if the angle is
            outside the joint's range

        Raises:
            ChainStructureError: If the joint is not part of the chain
        """
        return self._move_joint(joint, angle_degrees, check_moving=True)

    def _move_joint(self, joint: Union[Joint, str], angle_degrees: float, check_moving: bool) -> bool:
        joint_id = joint.id if isinstance(joint, Joint) else joint
        live_joint = self.chain.get_joint(joint_id)
        if check_moving and not self.has_finished_moving():
            return False
        if live_joint.body is None:
            logger.warning("joint_move_rejected", joint=joint_id, reason="no_actuator")
            return False
        if not live_joint.range.is_in_range(angle_degrees):
            return False
        self._controllers[joint_id].add_task(angle_degrees)
        return True

    def set_claw(self, open_percentage: float) -> bool:
        """
        Open (1.0) or close (0.0) the gripper.

        Returns:
            False while a claw move is running or when the arm has no
            motorised gripper

        Raises:
            MotionError: If ``open_percentage`` is outside [0, 1]
        """
        if open_percentage < 0.0 or open_percentage > 1.0:
            raise MotionError(
                "Claw opening must be in range 0...1",
                details={"open_percentage": open_percentage},
            )
        if self._gripper_animator is not None and not self._gripper_animator.has_finished():
            return False
        gripper = self.gripper
        if gripper is None or gripper.body is None:
            logger.warning("claw_unavailable")
            return False
        self._gripper_animator = GripperAnimator(gripper, open_percentage, self.controller_config)
        return True

    def emergency_stop(self) -> None:
        """
        Halt every motor now.

        Pending and running joint moves are dropped, the claw stops, and an
        in-flight solve is cancelled; its callback fires with FAILURE.
        """
        logger.warning("emergency_stop")
        if self._gripper_animator is not None:
            self._gripper_animator.emergency_stop()
            self._gripper_animator = None
        for controller in self._controllers.values():
            controller.emergency_stop()
        if self._solver is not None:
            solver = self._solver
            self._solver = None
            solver.cancel()
            solver.completion.notify(Outcome.FAILURE, solver.chain)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, delta_seconds: float) -> bool:
        self._advance_solver(delta_seconds)
        if self._gripper_animator is not None and not self._gripper_animator.tick(delta_seconds):
            self._gripper_animator = None
        for controller in self._controllers.values():
            controller.tick(delta_seconds)
        self.chain.sync_with_actuators()
        return True

    def _advance_solver(self, delta_seconds: float) -> None:
        if self._solver is None:
            return

        outcome = self._solver.solve(self.solver_config.iterations_per_tick)
        self.solve_time_secs += delta_seconds
        if outcome is Outcome.PROCESSING:
            return

        solver = self._solver
        self._solver = None

        if outcome is Outcome.SUCCESS:
            logger.info(
                "solution_found",
                solve_time_ms=round(self.solve_time_secs * 1000.0, 3),
                angles={j.id: round(j.orientation_degrees, 3) for j in solver.chain.joints},
            )
            for joint in solver.chain.joints:
                if not self._move_joint(joint.id, joint.orientation_degrees, check_moving=False):
                    logger.error(
                        "solved_move_rejected",
                        joint=joint.id,
                        angle=joint.orientation_degrees,
                        in_range=joint.range.is_in_range(joint.orientation_degrees),
                    )
        else:
            logger.warning(
                "solve_failed", solve_time_ms=round(self.solve_time_secs * 1000.0, 3)
            )

        solver.completion.notify(outcome, solver.chain)
