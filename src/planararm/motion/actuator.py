"""
Actuator boundary between the motion layer and the physics layer.

The animators only ever read the current angle (or claw opening), command a
signed speed and switch the motor on or off. Anything providing these
methods can drive an arm: the kinematic stand-in in
:mod:`planararm.simulation.environment`, a physics engine binding, or a test
double.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class RevoluteActuator(Protocol):
    """Motorised revolute joint. Angles and speeds are in radians."""

    lower_limit: float
    upper_limit: float

    def get_joint_angle(self) -> float:
        ...

    def set_motor_speed(self, radians_per_second: float) -> None:
        ...

    def set_max_motor_torque(self, torque: float) -> None:
        ...

    def enable_motor(self, enabled: bool) -> None:
        ...

    def enable_limit(self, enabled: bool) -> None:
        ...


@runtime_checkable
class GripperActuator(Protocol):
    """Motorised claw; opening is a fraction in ``[0, 1]``."""

    def get_open_percentage(self) -> float:
        ...

    def set_claw_speed(self, fraction_per_second: float) -> None:
        ...
