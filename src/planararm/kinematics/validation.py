"""
Constraint validators that gate solver-proposed configurations.

A validator is a pure predicate over a chain snapshot whose forward
kinematics are up to date. It answers "is this configuration invalid?",
never mutates the chain, and returns the same answer for the same snapshot.
"""

from typing import Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from planararm.core.angles import direction, signed_angle_between
from planararm.core.config import ConstraintConfig
from planararm.kinematics.chain import KinematicsChain


@runtime_checkable
class ConstraintValidator(Protocol):
    """Decides whether a chain configuration must be rejected."""

    def is_invalid_configuration(self, chain: KinematicsChain) -> bool:
        ...


class AlwaysValidValidator:
    """Accepts every configuration."""

    def is_invalid_configuration(self, chain: KinematicsChain) -> bool:
        return False


class GroundPlaneValidator:
    """Rejects configurations with any bone endpoint or joint below ``ground_y``."""

    def __init__(self, ground_y: float = 0.0) -> None:
        self.ground_y = ground_y

    def is_invalid_configuration(self, chain: KinematicsChain) -> bool:
        for bone in chain.bones:
            if bone.start[1] < self.ground_y or bone.end[1] < self.ground_y:
                return True
        for joint in chain.joints:
            if joint.position[1] < self.ground_y:
                return True
        return False


class ApproachAngleValidator:
    """
    Rejects configurations whose end bone deviates too far from a heading.

    Args:
        approach_heading: Required world heading of the end bone in degrees
            (270 points straight down).
        tolerance_deg: Allowed deviation in degrees.
    """

    def __init__(self, approach_heading: float = 270.0, tolerance_deg: float = 5.0) -> None:
        self.approach_heading = approach_heading
        self.tolerance_deg = tolerance_deg
        self._reference = direction(approach_heading)

    def is_invalid_configuration(self, chain: KinematicsChain) -> bool:
        end_bone = chain.end_bone
        actual = np.asarray(end_bone.end) - np.asarray(end_bone.start)
        deviation = signed_angle_between(actual, self._reference)
        return abs(deviation) > self.tolerance_deg


class CompositeValidator:
    """Runs validators in order and stops at the first one that rejects."""

    def __init__(self, *validators: ConstraintValidator) -> None:
        self.validators: Sequence[ConstraintValidator] = tuple(validators)

    def is_invalid_configuration(self, chain: KinematicsChain) -> bool:
        return any(v.is_invalid_configuration(chain) for v in self.validators)


def default_validator(config: Optional[ConstraintConfig] = None) -> CompositeValidator:
    """Ground plane check first, then the approach angle when one is configured."""
    config = config or ConstraintConfig()
    validators: list[ConstraintValidator] = [GroundPlaneValidator(config.ground_y)]
    if config.approach_heading is not None:
        validators.append(
            ApproachAngleValidator(config.approach_heading, config.approach_tolerance_deg)
        )
    return CompositeValidator(*validators)
