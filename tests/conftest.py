"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import pytest

from planararm.arm import RobotArm
from planararm.core.config import (
    ArmConfig,
    BoneConfig,
    ConstraintConfig,
    ControllerConfig,
    JointConfig,
    SolverConfig,
    default_arm_config,
)
from planararm.kinematics.chain import KinematicsChain
from planararm.simulation.environment import SimulationEnvironment


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_dir(temp_dir):
    """Create a configuration directory holding one arm."""
    config_dir = temp_dir / "config"
    (config_dir / "arms").mkdir(parents=True)

    arm_config = """
arm:
  name: "Test Arm"
  base_position: [0.0, 0.0]
  joints:
    - id: shoulder
    - id: elbow
      range: {min: 270, max: 90}
  bones:
    - {id: upper, joint_a: shoulder, joint_b: elbow, length: 1.0}
    - {id: lower, joint_a: elbow, length: 0.5}

solver:
  iterations_per_tick: 10
  epsilon: 0.05

controller:
  speed_deg_per_sec: 45.0

constraints:
  approach_heading: null
  ground_y: -10.0
"""
    (config_dir / "arms" / "test_arm.yaml").write_text(arm_config)
    return config_dir


@pytest.fixture
def three_link_chain():
    """Three unit-length bones with free joints, rooted at the origin."""
    chain = KinematicsChain()
    j0 = chain.add_joint("j0")
    j1 = chain.add_joint("j1")
    j2 = chain.add_joint("j2")
    chain.add_bone("b0", j0, j1, 1.0)
    chain.add_bone("b1", j1, j2, 1.0)
    chain.add_bone("b2", j2, None, 1.0)
    chain.apply_forward_kinematics()
    return chain


@pytest.fixture
def planar_arm_config():
    """Free three-joint arm without ground or approach constraints."""
    return ArmConfig(
        name="planar",
        base_position=(0.0, 0.0),
        joints=[JointConfig(id="j0"), JointConfig(id="j1"), JointConfig(id="j2")],
        bones=[
            BoneConfig(id="b0", joint_a="j0", joint_b="j1", length=1.0),
            BoneConfig(id="b1", joint_a="j1", joint_b="j2", length=1.0),
            BoneConfig(id="b2", joint_a="j2", length=1.0),
        ],
        solver=SolverConfig(iterations_per_tick=20, max_total_iterations=2000),
        controller=ControllerConfig(speed_deg_per_sec=30.0),
        constraints=ConstraintConfig(ground_y=-100.0, approach_heading=None),
    )


@pytest.fixture
def sim_env():
    """Running kinematic simulation with a 60 Hz step."""
    with SimulationEnvironment(time_step=1.0 / 60.0) as env:
        yield env


@pytest.fixture
def planar_arm(planar_arm_config, sim_env):
    """Planar arm attached to the simulation."""
    arm = RobotArm.from_config(planar_arm_config)
    sim_env.add_arm(arm)
    return arm


@pytest.fixture
def default_arm(sim_env):
    """Built-in gripper arm attached to the simulation."""
    arm = RobotArm.from_config(default_arm_config())
    sim_env.add_arm(arm)
    return arm
