"""
Unit tests for configuration management.
"""

import pytest

from planararm.core.config import (
    ArmConfig,
    BoneConfig,
    ConfigManager,
    JointConfig,
    SolverConfig,
    default_arm_config,
)
from planararm.core.exceptions import ConfigurationError


class TestArmConfig:
    """Tests for ArmConfig model."""

    def test_create_minimal(self):
        """Test creating config with minimal fields."""
        config = ArmConfig(
            name="Test",
            joints=[JointConfig(id="a")],
            bones=[BoneConfig(id="b", joint_a="a", length=1.0)],
        )
        assert config.name == "Test"
        assert config.solver.iterations_per_tick == 100
        assert config.controller.speed_deg_per_sec == 10.0
        assert config.constraints.approach_heading == 270.0

    def test_unknown_joint_reference(self):
        """Test bones must reference declared joints."""
        with pytest.raises(ValueError):
            ArmConfig(
                name="Test",
                joints=[JointConfig(id="a")],
                bones=[BoneConfig(id="b", joint_a="missing", length=1.0)],
            )

    def test_duplicate_joint_ids(self):
        """Test joint ids must be unique."""
        with pytest.raises(ValueError):
            ArmConfig(
                name="Test",
                joints=[JointConfig(id="a"), JointConfig(id="a")],
                bones=[BoneConfig(id="b", joint_a="a", length=1.0)],
            )

    def test_non_positive_length(self):
        """Test bone lengths must be positive."""
        with pytest.raises(ValueError):
            BoneConfig(id="b", joint_a="a", length=0.0)

    def test_step_fractions_validated(self):
        """Test revert fractions must lie in (0, 1]."""
        with pytest.raises(ValueError):
            SolverConfig(step_fractions=[1.0, 0.0])

    def test_default_arm(self):
        """Test the built-in arm layout."""
        config = default_arm_config()
        assert [j.id for j in config.joints] == ["joint_0", "joint_1", "joint_2", "joint_3"]
        assert config.joints[1].range.min == 270.0
        assert config.joints[1].range.max == 90.0
        assert config.gripper is not None
        assert config.gripper.joint_a == "joint_3"

    def test_from_yaml_missing_file(self, temp_dir):
        """Test loading a missing file."""
        with pytest.raises(ConfigurationError):
            ArmConfig.from_yaml(temp_dir / "missing.yaml")

    def test_from_yaml_missing_section(self, temp_dir):
        """Test a file without an arm section."""
        path = temp_dir / "bad.yaml"
        path.write_text("solver:\n  epsilon: 0.1\n")
        with pytest.raises(ConfigurationError):
            ArmConfig.from_yaml(path)

    def test_from_yaml_invalid_values(self, temp_dir):
        """Test validation errors are wrapped."""
        path = temp_dir / "bad.yaml"
        path.write_text(
            "arm:\n  name: x\n  joints: [{id: a}]\n  bones: [{id: b, joint_a: a, length: -1}]\n"
        )
        with pytest.raises(ConfigurationError) as exc_info:
            ArmConfig.from_yaml(path)
        assert "error" in exc_info.value.details


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_init_with_valid_dir(self, sample_config_dir):
        """Test initialization with valid directory."""
        manager = ConfigManager(sample_config_dir)
        assert manager.config_dir == sample_config_dir

    def test_init_with_invalid_dir(self, temp_dir):
        """Test initialization with non-existent directory."""
        with pytest.raises(ConfigurationError):
            ConfigManager(temp_dir / "nonexistent")

    def test_list_arms(self, sample_config_dir):
        """Test listing arm configurations."""
        manager = ConfigManager(sample_config_dir)
        assert manager.list_arms() == ["test_arm"]

    def test_get_arm(self, sample_config_dir):
        """Test getting a specific arm with merged sections."""
        manager = ConfigManager(sample_config_dir)

        arm = manager.get_arm("test_arm")
        assert arm.name == "Test Arm"
        assert arm.base_position == (0.0, 0.0)
        assert arm.solver.iterations_per_tick == 10
        assert arm.controller.speed_deg_per_sec == 45.0
        assert arm.constraints.approach_heading is None
        assert arm.bones[1].joint_b is None

    def test_get_arm_not_found(self, sample_config_dir):
        """Test getting a non-existent arm."""
        manager = ConfigManager(sample_config_dir)

        with pytest.raises(ConfigurationError) as exc_info:
            manager.get_arm("nonexistent")

        assert "available" in exc_info.value.details
        assert exc_info.value.details["available"] == ["test_arm"]
