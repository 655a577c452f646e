import math

import phoenix6.hardware
import wpilib
from wpimath.geometry import Rotation2d

from ..abstract.sensor import AbsoluteEncoder, Gyro


class AnalogAbsoluteEncoder(AbsoluteEncoder):
    def __init__(self, channel: int):
        """
        Absolute encoder plugged into one of the RIO's analog inputs

        :param channel: Analog input channel
        """
        super().__init__()

        self._encoder = wpilib.AnalogInput(channel)
        wpilib.SmartDashboard.putData(f"Absolute Analog Encoder {channel}", self)

    @property
    def absolute_position(self) -> Rotation2d:
        # Output voltage spans the 5V rail over one rotation
        rotations = self._encoder.getVoltage() / wpilib.RobotController.getVoltage5V()
        return Rotation2d(rotations * 2 * math.pi)


class AbsoluteDutyCycleEncoder(AbsoluteEncoder):
    def __init__(self, dio_pin: int):
        super().__init__()

        self._encoder = wpilib.DutyCycleEncoder(dio_pin)
        wpilib.SmartDashboard.putData(f"Absolute PWM Encoder {dio_pin}", self)

    @property
    def absolute_position(self) -> Rotation2d:
        pos = self._encoder.get()  # 0.0 <= pos < 1.0 (rotations)
        return Rotation2d(pos * 2 * math.pi)


class Pigeon2Gyro(Gyro):
    def __init__(self, id_: int | tuple[int, str], invert: bool = False):
        super().__init__()
        self.invert = invert

        try:
            # Unpack tuple of sensor id and CAN bus name into Pigeon2 constructor
            self._gyro = phoenix6.hardware.Pigeon2(*id_)
        except TypeError:
            # Only an int was provided for id_
            self._gyro = phoenix6.hardware.Pigeon2(id_)

        self._yaw_signal = self._gyro.get_yaw()

        wpilib.SmartDashboard.putData("Pigeon 2", self)

    def zero_heading(self):
        self._gyro.set_yaw(0)

    @property
    def heading(self) -> Rotation2d:
        yaw = self._yaw_signal.refresh().value
        if self.invert:
            yaw = 360 - yaw
        return Rotation2d.fromDegrees(yaw)
