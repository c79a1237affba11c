"""
Simulation module - Kinematic stand-in for the physics layer.
"""

from planararm.simulation.environment import (
    SimulatedGripperActuator,
    SimulatedRevoluteActuator,
    SimulationEnvironment,
)

__all__ = [
    "SimulatedGripperActuator",
    "SimulatedRevoluteActuator",
    "SimulationEnvironment",
]
