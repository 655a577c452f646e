from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Protocol

from wpimath.geometry import Rotation2d


@dataclass
class ModuleIOInputs:
    """Sensor readings of one swerve module, refreshed by ModuleIO.update_inputs() every loop"""

    drive_position_rad: float = 0.0
    drive_velocity_rad_per_sec: float = 0.0
    drive_applied_volts: float = 0.0
    drive_current_amps: list[float] = field(default_factory=list)

    turn_absolute_position: Rotation2d = field(default_factory=Rotation2d)
    turn_position: Rotation2d = field(default_factory=Rotation2d)
    turn_velocity_rad_per_sec: float = 0.0
    turn_applied_volts: float = 0.0
    turn_current_amps: list[float] = field(default_factory=list)

    # High-frequency samples buffered by the odometry thread since the last update
    odometry_timestamps: list[float] = field(default_factory=list)
    odometry_drive_positions_rad: list[float] = field(default_factory=list)
    odometry_turn_positions: list[Rotation2d] = field(default_factory=list)


class ModuleIO(Protocol):
    """Hardware layer of a swerve module: a drive motor that spins the wheel and a turn motor that steers it"""

    @abstractmethod
    def update_inputs(self, inputs: ModuleIOInputs):
        """
        Refresh the inputs object with the latest sensor readings

        :param inputs: Inputs object to update in place
        """
        raise NotImplementedError

    @abstractmethod
    def set_target_velocity(self, velocity: float):
        """
        Follow a wheel velocity using closed loop control

        :param velocity: Desired wheel velocity in rad/s
        """
        raise NotImplementedError

    @abstractmethod
    def set_drive_voltage(self, volts: float):
        """
        Power the drive motor with the specified voltage

        :param volts: Voltage in volts (between -12 and +12 for most FRC motors)
        """
        raise NotImplementedError

    @abstractmethod
    def set_turn_position(self, radians: float):
        """
        Steer the wheel to an angle using closed loop control

        :param radians: Desired wheel angle in radians
        """
        raise NotImplementedError

    @abstractmethod
    def set_turn_voltage(self, volts: float):
        """
        Power the turn motor with the specified voltage

        :param volts: Voltage in volts
        """
        raise NotImplementedError

    @abstractmethod
    def set_drive_brake_mode(self, enable: bool):
        """Brake (True) or coast (False) the drive motor when it is not powered"""
        raise NotImplementedError

    @abstractmethod
    def set_turn_brake_mode(self, enable: bool):
        """Brake (True) or coast (False) the turn motor when it is not powered"""
        raise NotImplementedError
