"""
Custom exceptions for PlanarArm.

All PlanarArm exceptions inherit from PlanarArmError for easy catching.
Busy or out-of-range motion requests are not errors; they are reported
through boolean return values by the arm.
"""

from typing import Any


class PlanarArmError(Exception):
    """Base exception for all PlanarArm errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(PlanarArmError):
    """Raised when configuration is invalid or missing."""

    pass


class ChainStructureError(PlanarArmError):
    """Raised when a kinematics chain is malformed (multiple roots, broken links)."""

    pass


class SolverError(PlanarArmError):
    """Raised when the solver protocol is misused."""

    pass


class MotionError(PlanarArmError):
    """Raised when a motion request is malformed."""

    pass


class ActuatorError(PlanarArmError):
    """Raised when a joint or gripper has no usable actuator."""

    def __init__(
        self,
        message: str,
        device: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.device = device
