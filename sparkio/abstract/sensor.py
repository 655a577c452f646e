import math
from abc import abstractmethod

from wpimath.geometry import Rotation2d
from wpiutil import Sendable, SendableBuilder

from . import SendableABCMeta


class Gyro(Sendable, metaclass=SendableABCMeta):
    """Chassis yaw sensor. The drive integrates heading from module motion when none is present."""

    @abstractmethod
    def zero_heading(self):
        """Make the current chassis heading read as zero"""
        raise NotImplementedError

    @property
    @abstractmethod
    def heading(self) -> Rotation2d:
        """CCW+ chassis yaw, unbounded"""
        raise NotImplementedError

    def initSendable(self, builder: SendableBuilder):
        # "Value" in degrees is what the dashboard's gyro widget reads
        builder.setSmartDashboardType("Gyro")
        builder.addDoubleProperty("Value", lambda: self.heading.degrees(), lambda _: None)
        builder.addDoubleProperty("Heading (rad)", lambda: self.heading.radians(), lambda _: None)


class AbsoluteEncoder(Sendable, metaclass=SendableABCMeta):
    """
    Sensor reporting where a swerve wheel points within one rotation, used to seed the turn motor's relative encoder
    at startup. Analog encoders span the 5V rail over one rotation; duty cycle encoders report a fraction of a
    rotation. Mounting offsets are subtracted by the module IO, not here.
    """

    @property
    @abstractmethod
    def absolute_position(self) -> Rotation2d:
        """Raw wheel angle in [0, 2π), before the calibrated offset is subtracted"""
        raise NotImplementedError

    def initSendable(self, builder: SendableBuilder):
        builder.setSmartDashboardType("AbsoluteEncoder")
        builder.addDoubleProperty(
            "Raw Position (rot)", lambda: self.absolute_position.radians() / (2 * math.pi), lambda _: None
        )
        builder.addDoubleProperty("Raw Position (deg)", lambda: self.absolute_position.degrees(), lambda _: None)
