"""
Cyclic coordinate descent (CCD) inverse kinematics.

The solver works on a private chain snapshot and is driven cooperatively:
each :meth:`CCDSolver.solve` call runs at most a caller-supplied number of
iterations and returns :attr:`Outcome.PROCESSING` until the end effector is
within ``epsilon`` of the target (SUCCESS) or the cumulative iteration budget
is spent (FAILURE). All state needed to resume lives on the solver object.

One iteration visits every pivot joint once, from the end of the chain
toward the root. For each pivot the joint is rotated so that the effector
lies on the ray from the pivot to the aim point, using the shorter arc,
clamped to the joint's movement range and then checked by the constraint
validator. A rejected candidate is retried with smaller fractions of the
rotation and finally reverted; the pivot simply keeps its angle for this
pass.

With an ``approach_heading`` the end bone is treated as a wrist: CCD places
the wrist point ``target - end_length * direction(approach_heading)`` and
the wrist joint is re-aimed along the approach heading after every step.
"""

import time
from enum import Enum
from typing import Callable, Optional, Sequence

import numpy as np

from planararm.core.angles import direction, signed_angle_between
from planararm.core.config import SolverConfig
from planararm.core.exceptions import SolverError
from planararm.core.logging import get_logger
from planararm.kinematics.chain import Joint, KinematicsChain
from planararm.kinematics.validation import ConstraintValidator

logger = get_logger(__name__)

MIN_ROTATION_DEG = 1e-9


class Outcome(Enum):
    """Result of a :meth:`CCDSolver.solve` call."""

    PROCESSING = "processing"
    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def is_terminal(self) -> bool:
        return self is not Outcome.PROCESSING


CompletionHandler = Callable[[Outcome, KinematicsChain], None]


class CompletionCallback:
    """
    One-shot notification for the end of a solve session.

    The chain passed to the handler is only valid for the duration of the
    call; handlers that need it later must copy it.
    """

    def __init__(self, handler: Optional[CompletionHandler] = None) -> None:
        self._handler = handler
        self._notified = False

    @property
    def notified(self) -> bool:
        return self._notified

    def notify(self, outcome: Outcome, chain: KinematicsChain) -> None:
        if not outcome.is_terminal:
            raise SolverError("Completion requires a terminal outcome", details={"outcome": outcome.name})
        if self._notified:
            raise SolverError("Completion callback already notified")
        self._notified = True
        if self._handler is not None:
            self._handler(outcome, chain)


class CCDSolver:
    """
    Resumable CCD solve session over a chain snapshot.

    Args:
        chain: Snapshot to mutate; never the live chain.
        target: Point the end effector should reach.
        validator: Gate for candidate configurations.
        completion: Callback the orchestrator fires once the session ends.
        config: Iteration budgets and tolerance.
        approach_heading: Required world heading of the end bone, or None.
    """

    def __init__(
        self,
        chain: KinematicsChain,
        target: Sequence[float],
        validator: ConstraintValidator,
        completion: Optional[CompletionCallback] = None,
        config: Optional[SolverConfig] = None,
        approach_heading: Optional[float] = None,
    ) -> None:
        self.chain = chain
        self.target = np.asarray(target, dtype=float)
        self.validator = validator
        self.completion = completion or CompletionCallback()
        self.config = config or SolverConfig()
        self.approach_heading = approach_heading

        self._iterations = 0
        self._rejected_steps = 0
        self._elapsed = 0.0
        self._outcome = Outcome.PROCESSING

        bones = chain.bones
        end_bone = chain.end_bone
        if approach_heading is None:
            self._wrist: Optional[Joint] = None
            self._wrist_parent: Optional[str] = None
            self._aim = self.target
            pivot_bones = bones
        else:
            self._wrist = chain.get_joint(end_bone.joint_a)
            self._wrist_parent = bones[-2].id if len(bones) > 1 else None
            self._aim = self.target - end_bone.length * direction(approach_heading)
            pivot_bones = bones[:-1]
        self._pivots = [chain.get_joint(b.joint_a) for b in reversed(pivot_bones)]

        self._align_wrist()
        chain.apply_forward_kinematics()
        self._feasible = not validator.is_invalid_configuration(chain)

    @property
    def iterations(self) -> int:
        return self._iterations

    @property
    def rejected_steps(self) -> int:
        return self._rejected_steps

    @property
    def elapsed_seconds(self) -> float:
        return self._elapsed

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    def distance_to_target(self) -> float:
        return float(np.linalg.norm(self.chain.end_effector - self.target))

    def solve(self, max_iterations: int) -> Outcome:
        """
        Run up to ``max_iterations`` CCD passes.

        Returns:
            PROCESSING if the session needs more calls, otherwise the
            terminal outcome (repeated on every later call).
        """
        if self._outcome.is_terminal:
            return self._outcome

        started = time.perf_counter()
        try:
            if self._converged():
                return self._finish(Outcome.SUCCESS)
            for _ in range(max_iterations):
                if self._iterations >= self.config.max_total_iterations:
                    break
                for pivot in self._pivots:
                    self._step(pivot)
                self._iterations += 1
                if self._converged():
                    return self._finish(Outcome.SUCCESS)
            if self._iterations >= self.config.max_total_iterations:
                return self._finish(Outcome.FAILURE)
            return Outcome.PROCESSING
        finally:
            self._elapsed += time.perf_counter() - started

    def cancel(self) -> None:
        """End the session as a failure without further iterations."""
        if not self._outcome.is_terminal:
            self._finish(Outcome.FAILURE)

    def _converged(self) -> bool:
        return self._feasible and self.distance_to_target() < self.config.epsilon

    def _effector(self) -> np.ndarray:
        if self._wrist is not None:
            return self._wrist.position
        return self.chain.end_bone.end

    def _align_wrist(self) -> None:
        if self._wrist is None:
            return
        parent_heading = (
            self.chain.bone_heading(self._wrist_parent) if self._wrist_parent is not None else 0.0
        )
        self._wrist.orientation_degrees = self._wrist.range.clamp(
            self.approach_heading - parent_heading
        )

    def _step(self, pivot: Joint) -> None:
        to_effector = self._effector() - pivot.position
        to_aim = self._aim - pivot.position
        delta = signed_angle_between(to_effector, to_aim)
        if abs(delta) < MIN_ROTATION_DEG:
            return

        previous = pivot.orientation_degrees
        previous_wrist = self._wrist.orientation_degrees if self._wrist is not None else None
        for fraction in self.config.step_fractions:
            pivot.orientation_degrees = pivot.range.clamp(previous + delta * fraction)
            self._align_wrist()
            self.chain.apply_forward_kinematics()
            invalid = self.validator.is_invalid_configuration(self.chain)
            # leaving an already invalid pose is always allowed
            if not invalid or not self._feasible:
                self._feasible = not invalid
                return

        pivot.orientation_degrees = previous
        if self._wrist is not None:
            self._wrist.orientation_degrees = previous_wrist
        self.chain.apply_forward_kinematics()
        self._rejected_steps += 1

    def _finish(self, outcome: Outcome) -> Outcome:
        self._outcome = outcome
        log = logger.info if outcome is Outcome.SUCCESS else logger.warning
        log(
            "solve_finished",
            outcome=outcome.name,
            iterations=self._iterations,
            rejected_steps=self._rejected_steps,
            distance=round(self.distance_to_target(), 6),
            elapsed_ms=round(self._elapsed * 1000.0, 3),
        )
        return outcome
