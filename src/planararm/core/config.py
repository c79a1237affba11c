"""
Configuration management for PlanarArm.

Handles loading, validation, and access to arm configurations. An arm
configuration describes the chain layout (joints, bones, gripper) together
with the solver, motion controller and constraint settings used to drive it.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from planararm.core.exceptions import ConfigurationError


class RangeConfig(BaseModel):
    """Allowed band of a joint in degrees; may wrap through 0."""

    min: float = Field(default=0.0, ge=0.0, le=360.0)
    max: float = Field(default=360.0, ge=0.0, le=360.0)


class JointConfig(BaseModel):
    """A rotational joint."""

    id: str
    initial_angle: float = 0.0
    range: RangeConfig | None = None


class BoneConfig(BaseModel):
    """A rigid bone between two joints."""

    id: str
    joint_a: str
    joint_b: str | None = None
    length: float = Field(gt=0.0)


class GripperConfig(BaseModel):
    """The terminal gripper bone."""

    id: str = "gripper"
    joint_a: str
    length: float = Field(gt=0.0)
    base_plate_length: float = Field(default=0.4, gt=0.0)
    claw_length: float = Field(default=0.3, gt=0.0)


class SolverConfig(BaseModel):
    """Iteration budgets and tolerances of the CCD solver."""

    iterations_per_tick: int = Field(default=100, gt=0)
    max_total_iterations: int = Field(default=10000, gt=0)
    epsilon: float = Field(default=0.01, gt=0.0)
    step_fractions: list[float] = Field(default_factory=lambda: [1.0, 0.5, 0.25])

    @field_validator("step_fractions")
    @classmethod
    def _check_fractions(cls, value: list[float]) -> list[float]:
        if not value or any(f <= 0.0 or f > 1.0 for f in value):
            raise ValueError("step fractions must be in (0, 1]")
        return value


class ControllerConfig(BaseModel):
    """Motor settings used by the joint and gripper animators."""

    speed_deg_per_sec: float = Field(default=10.0, gt=0.0)
    epsilon_deg: float = Field(default=0.5, gt=0.0)
    max_motor_torque: float = Field(default=10000.0, gt=0.0)
    claw_speed: float = Field(default=0.5, gt=0.0)
    claw_epsilon: float = Field(default=0.01, gt=0.0)


class ConstraintConfig(BaseModel):
    """Global validity constraints applied to solved configurations."""

    ground_y: float = 0.0
    approach_heading: float | None = 270.0
    approach_tolerance_deg: float = Field(default=5.0, ge=0.0)


class ArmConfig(BaseModel):
    """Complete arm configuration model."""

    name: str
    base_position: tuple[float, float] = (0.0, 0.5)
    joints: list[JointConfig]
    bones: list[BoneConfig]
    gripper: GripperConfig | None = None
    solver: SolverConfig = Field(default_factory=SolverConfig)
    controller: ControllerConfig = Field(default_factory=ControllerConfig)
    constraints: ConstraintConfig = Field(default_factory=ConstraintConfig)

    @model_validator(mode="after")
    def _check_references(self) -> "ArmConfig":
        joint_ids = [j.id for j in self.joints]
        if len(set(joint_ids)) != len(joint_ids):
            raise ValueError("joint ids must be unique")
        known = set(joint_ids)
        for bone in self.bones:
            for ref in (bone.joint_a, bone.joint_b):
                if ref is not None and ref not in known:
                    raise ValueError(f"bone '{bone.id}' references unknown joint '{ref}'")
        if self.gripper is not None and self.gripper.joint_a not in known:
            raise ValueError(
                f"gripper '{self.gripper.id}' references unknown joint '{self.gripper.joint_a}'"
            )
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ArmConfig":
        """
        Load an arm configuration from a YAML file.

        The file holds a top-level ``arm`` mapping; optional top-level
        ``solver``, ``controller`` and ``constraints`` sections are merged in.

        Raises:
            ConfigurationError: If the file is missing or invalid
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Arm configuration not found: {path}")
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse arm config: {path}", details={"error": str(e)}
            ) from e

        if not data or "arm" not in data:
            raise ConfigurationError(f"Missing 'arm' section in {path}")

        arm_data: dict[str, Any] = dict(data["arm"])
        for section in ("solver", "controller", "constraints"):
            if section in data:
                arm_data[section] = data[section]
        try:
            return cls(**arm_data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Failed to load arm config: {path}", details={"error": str(e)}
            ) from e


def default_arm_config() -> ArmConfig:
    """
    Built-in four-joint arm with a gripper.

    The root joint turns freely; the other joints may swing 90 degrees
    either way relative to their predecessor bone. The home pose raises the
    first bone, holds the second level and hangs the gripper straight down.
    """
    limited = RangeConfig(min=270.0, max=90.0)
    return ArmConfig(
        name="default",
        base_position=(0.0, 0.5),
        joints=[
            JointConfig(id="joint_0", initial_angle=90.0),
            JointConfig(id="joint_1", initial_angle=270.0, range=limited),
            JointConfig(id="joint_2", initial_angle=270.0, range=limited),
            JointConfig(id="joint_3", initial_angle=0.0, range=limited),
        ],
        bones=[
            BoneConfig(id="bone_0", joint_a="joint_0", joint_b="joint_1", length=1.0),
            BoneConfig(id="bone_1", joint_a="joint_1", joint_b="joint_2", length=1.0),
            BoneConfig(id="bone_2", joint_a="joint_2", joint_b="joint_3", length=0.5),
        ],
        gripper=GripperConfig(id="gripper", joint_a="joint_3", length=0.3),
    )


@dataclass
class ConfigManager:
    """
    Central configuration manager for PlanarArm.

    Loads and validates arm configurations from ``<config_dir>/arms/*.yaml``.

    Example:
        >>> config = ConfigManager(config_dir=Path("config"))
        >>> arm = config.get_arm("default")
    """

    config_dir: Path
    _arms: dict[str, ArmConfig] = field(default_factory=dict, init=False)
    _loaded: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.config_dir = Path(self.config_dir)
        if not self.config_dir.exists():
            raise ConfigurationError(
                f"Configuration directory not found: {self.config_dir}"
            )

    def load(self) -> None:
        """Load all arm configurations from disk."""
        arms_dir = self.config_dir / "arms"
        self._arms.clear()
        if arms_dir.exists():
            for config_file in sorted(arms_dir.glob("*.yaml")):
                self._arms[config_file.stem] = ArmConfig.from_yaml(config_file)
        self._loaded = True

    def get_arm(self, name: str) -> ArmConfig:
        """
        Get arm configuration by name.

        Args:
            name: Arm configuration name (without .yaml extension)

        Returns:
            ArmConfig instance

        Raises:
            ConfigurationError: If the arm is not found
        """
        if not self._loaded:
            self.load()

        if name not in self._arms:
            available = list(self._arms.keys())
            raise ConfigurationError(
                f"Arm configuration not found: {name}",
                details={"available": available},
            )
        return self._arms[name]

    def list_arms(self) -> list[str]:
        """List available arm configurations."""
        if not self._loaded:
            self.load()
        return list(self._arms.keys())
