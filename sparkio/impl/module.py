import copy
import logging
from dataclasses import dataclass
from typing import Optional

import rev
from pint import Quantity
from wpimath.geometry import Rotation2d

from . import spark
from .odometry import ODOMETRY_FREQUENCY, SparkMaxOdometryThread, drain
from .spark import NeutralMode
from .. import conversions, u
from ..abstract.module import ModuleIO, ModuleIOInputs
from ..abstract.sensor import AbsoluteEncoder

logger = logging.getLogger(__name__)

# Drive and turn motor CAN IDs for each module index (front left, front right, back left, back right)
MODULE_CAN_IDS = ((1, 2), (3, 4), (5, 6), (7, 8))


@dataclass
class SparkMaxModuleParameters:
    # Motor rotations per mechanism rotation
    drive_gear_ratio: float
    turn_gear_ratio: float

    drive_current_limit: int
    turn_current_limit: int
    nominal_voltage: float

    drive_neutral_mode: NeutralMode
    turn_neutral_mode: NeutralMode

    drive_kP: float
    drive_kI: float
    drive_kD: float

    turn_kP: float
    turn_kI: float
    turn_kD: float
    turn_kFF: float

    invert_drive_motor: bool
    invert_turn_motor: bool

    # Velocity filtering of the NEO's built-in hall sensor
    encoder_measurement_period: Quantity
    encoder_average_depth: int

    def in_standard_units(self):
        data = copy.deepcopy(self)
        data.encoder_measurement_period = int(data.encoder_measurement_period.m_as(u.ms))
        return data


class SparkMaxModuleIO(ModuleIO):
    """
    Module IO for a SPARK MAX driving the wheel and a SPARK MAX steering it (NEO or NEO 550), with an optional
    absolute encoder (e.g. analog, plugged into the RIO) to initialize the steering angle.

    To calibrate the absolute encoder offsets, point the modules straight (such that forward motion on the drive motor
    will propel the robot forward) and copy the reported "Turn Absolute Position" of each module with a zero offset.
    """

    Parameters = SparkMaxModuleParameters

    def __init__(
        self,
        index: int,
        parameters: SparkMaxModuleParameters,
        absolute_encoder: Optional[AbsoluteEncoder] = None,
        absolute_encoder_offset: Rotation2d = Rotation2d(),
        report: bool = True,
    ):
        """
        :param index: Module index (0-3), which selects the CAN IDs in MODULE_CAN_IDS
        :param parameters: Options shared by every module of the drive base
        :param absolute_encoder: Sensor reporting the wheel's absolute angle, if the module has one
        :param absolute_encoder_offset: Absolute encoder reading when the wheel points forward
        :param report: If False, live readings are reported as zero (odometry samples are still drained)
        """
        if not 0 <= index < len(MODULE_CAN_IDS):
            raise ValueError("Invalid module index")

        self._params = parameters.in_standard_units()
        self._absolute_encoder = absolute_encoder
        self._offset = absolute_encoder_offset
        self._report = report

        drive_id, turn_id = MODULE_CAN_IDS[index]
        self._drive_motor = rev.SparkMax(drive_id, rev.SparkMax.MotorType.kBrushless)
        self._turn_motor = rev.SparkMax(turn_id, rev.SparkMax.MotorType.kBrushless)
        self._drive_controller = self._drive_motor.getClosedLoopController()
        self._turn_controller = self._turn_motor.getClosedLoopController()
        self._drive_encoder = self._drive_motor.getEncoder()
        self._turn_encoder = self._turn_motor.getEncoder()

        # Wait for each configuration call to be acknowledged, then return to non-blocking calls for the control loop
        self._drive_motor.setCANTimeout(spark.CONFIG_CAN_TIMEOUT)
        self._turn_motor.setCANTimeout(spark.CONFIG_CAN_TIMEOUT)

        self._config()
        self._drive_encoder.setPosition(0)
        self._turn_encoder.setPosition(
            conversions.mechanism_radians_to_motor_rotations(
                self.turn_absolute_position.radians(), self._params.turn_gear_ratio
            )
        )

        self._drive_motor.setCANTimeout(0)
        self._turn_motor.setCANTimeout(0)

        odometry = SparkMaxOdometryThread.get_instance()
        self._timestamp_queue, (self._drive_position_queue, self._turn_position_queue) = odometry.register_signals(
            (self._drive_encoder.getPosition, self._drive_motor),
            (self._turn_encoder.getPosition, self._turn_motor),
        )

        logger.info("Configured swerve module %d (drive CAN %d, turn CAN %d)", index, drive_id, turn_id)

    def _config(self):
        drive_settings = spark.base_config(
            self._params.drive_current_limit,
            self._params.nominal_voltage,
            self._params.invert_drive_motor,
            self._params.drive_neutral_mode,
        )
        drive_settings.closedLoop.pid(
            self._params.drive_kP, self._params.drive_kI, self._params.drive_kD, rev.ClosedLoopSlot.kSlot0
        )

        turn_settings = spark.base_config(
            self._params.turn_current_limit,
            self._params.nominal_voltage,
            self._params.invert_turn_motor,
            self._params.turn_neutral_mode,
        )
        turn_settings.closedLoop.pidf(
            self._params.turn_kP,
            self._params.turn_kI,
            self._params.turn_kD,
            self._params.turn_kFF,
            rev.ClosedLoopSlot.kSlot0,
        )

        for settings in (drive_settings, turn_settings):
            settings.encoder.uvwMeasurementPeriod(self._params.encoder_measurement_period)
            settings.encoder.uvwAverageDepth(self._params.encoder_average_depth)
            # Position frames must arrive at least as often as the odometry thread samples them
            settings.signals.primaryEncoderPositionPeriodMs(int(1000 / ODOMETRY_FREQUENCY))

        spark.apply_config(self._drive_motor, drive_settings)
        spark.apply_config(self._turn_motor, turn_settings)

    @property
    def turn_absolute_position(self) -> Rotation2d:
        if self._absolute_encoder is None:
            return Rotation2d()
        return self._absolute_encoder.absolute_position - self._offset

    def update_inputs(self, inputs: ModuleIOInputs):
        drive_ratio = self._params.drive_gear_ratio
        turn_ratio = self._params.turn_gear_ratio

        if self._report:
            inputs.drive_position_rad = conversions.motor_rotations_to_mechanism_radians(
                self._drive_encoder.getPosition(), drive_ratio
            )
            inputs.drive_velocity_rad_per_sec = conversions.motor_rpm_to_mechanism_radps(
                self._drive_encoder.getVelocity(), drive_ratio
            )
            inputs.drive_applied_volts = spark.applied_voltage(self._drive_motor)
            inputs.drive_current_amps = [self._drive_motor.getOutputCurrent()]

            inputs.turn_absolute_position = self.turn_absolute_position
            inputs.turn_position = Rotation2d(
                conversions.motor_rotations_to_mechanism_radians(self._turn_encoder.getPosition(), turn_ratio)
            )
            inputs.turn_velocity_rad_per_sec = conversions.motor_rpm_to_mechanism_radps(
                self._turn_encoder.getVelocity(), turn_ratio
            )
            inputs.turn_applied_volts = spark.applied_voltage(self._turn_motor)
            inputs.turn_current_amps = [self._turn_motor.getOutputCurrent()]
        else:
            inputs.drive_position_rad = 0.0
            inputs.drive_velocity_rad_per_sec = 0.0
            inputs.drive_applied_volts = 0.0
            inputs.drive_current_amps = [0.0]

            inputs.turn_absolute_position = Rotation2d()
            inputs.turn_position = Rotation2d()
            inputs.turn_velocity_rad_per_sec = 0.0
            inputs.turn_applied_volts = 0.0
            inputs.turn_current_amps = [0.0]

        inputs.odometry_timestamps = drain(self._timestamp_queue)
        inputs.odometry_drive_positions_rad = [
            conversions.motor_rotations_to_mechanism_radians(value, drive_ratio)
            for value in drain(self._drive_position_queue)
        ]
        inputs.odometry_turn_positions = [
            Rotation2d(conversions.motor_rotations_to_mechanism_radians(value, turn_ratio))
            for value in drain(self._turn_position_queue)
        ]

    def set_target_velocity(self, velocity: float):
        self._drive_controller.setReference(
            conversions.mechanism_radps_to_motor_rpm(velocity, self._params.drive_gear_ratio),
            rev.SparkMax.ControlType.kVelocity,
        )

    def set_drive_voltage(self, volts: float):
        self._drive_motor.setVoltage(volts)

    def set_turn_position(self, radians: float):
        self._turn_controller.setReference(
            conversions.mechanism_radians_to_motor_rotations(radians, self._params.turn_gear_ratio),
            rev.SparkMax.ControlType.kPosition,
        )

    def set_turn_voltage(self, volts: float):
        self._turn_motor.setVoltage(volts)

    def set_drive_brake_mode(self, enable: bool):
        spark.set_brake_mode(self._drive_motor, enable)

    def set_turn_brake_mode(self, enable: bool):
        spark.set_brake_mode(self._turn_motor, enable)


class DummyModuleIO(ModuleIO):
    """Module IO that does nothing. Use it for replay or for a robot without drive hardware."""

    def __init__(self, *args):
        pass

    def update_inputs(self, inputs: ModuleIOInputs):
        pass

    def set_target_velocity(self, velocity: float):
        pass

    def set_drive_voltage(self, volts: float):
        pass

    def set_turn_position(self, radians: float):
        pass

    def set_turn_voltage(self, volts: float):
        pass

    def set_drive_brake_mode(self, enable: bool):
        pass

    def set_turn_brake_mode(self, enable: bool):
        pass
