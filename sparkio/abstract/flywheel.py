from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class FlywheelIOInputs:
    position_rad: float = 0.0
    velocity_rad_per_sec: float = 0.0
    applied_volts: float = 0.0
    current_amps: list[float] = field(default_factory=list)


class FlywheelIO(Protocol):
    """Hardware layer of a flywheel (shooter) driven by one or more motors"""

    @abstractmethod
    def update_inputs(self, inputs: FlywheelIOInputs):
        raise NotImplementedError

    @abstractmethod
    def set_voltage(self, volts: float):
        """
        Run the flywheel open loop at the specified voltage

        :param volts: Voltage in volts
        """
        raise NotImplementedError

    @abstractmethod
    def set_velocity(self, velocity: float, ff_volts: float):
        """
        Run the flywheel closed loop at a velocity

        :param velocity: Desired flywheel velocity in rad/s
        :param ff_volts: Feedforward voltage added to the PID output
        """
        raise NotImplementedError

    @abstractmethod
    def set_split_velocity(self, top_velocity: float, top_ff_volts: float, bottom_velocity: float, bottom_ff_volts: float):
        """
        Run the top and bottom rollers closed loop at independent velocities (e.g. to add backspin)

        :param top_velocity: Desired top roller velocity in rad/s
        :param top_ff_volts: Feedforward voltage for the top roller
        :param bottom_velocity: Desired bottom roller velocity in rad/s
        :param bottom_ff_volts: Feedforward voltage for the bottom roller
        """
        raise NotImplementedError

    @abstractmethod
    def stop(self):
        raise NotImplementedError

    @abstractmethod
    def configure_pid(self, kP: float, kI: float, kD: float):
        """Replace the closed loop velocity gains"""
        raise NotImplementedError
