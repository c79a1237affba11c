"""
Core module - Shared utilities, configuration, and errors.
"""

from planararm.core.angles import (
    box2d_angle_to_deg,
    deg_to_rad,
    normalize_deg,
    rad_to_deg,
    shortest_rotation,
)
from planararm.core.config import (
    ArmConfig,
    ConfigManager,
    ConstraintConfig,
    ControllerConfig,
    SolverConfig,
    default_arm_config,
)
from planararm.core.exceptions import (
    ActuatorError,
    ChainStructureError,
    ConfigurationError,
    MotionError,
    PlanarArmError,
    SolverError,
)

__all__ = [
    # Angles
    "box2d_angle_to_deg",
    "deg_to_rad",
    "normalize_deg",
    "rad_to_deg",
    "shortest_rotation",
    # Config
    "ArmConfig",
    "ConfigManager",
    "ConstraintConfig",
    "ControllerConfig",
    "SolverConfig",
    "default_arm_config",
    # Exceptions
    "PlanarArmError",
    "ActuatorError",
    "ChainStructureError",
    "ConfigurationError",
    "MotionError",
    "SolverError",
]
