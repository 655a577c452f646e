import logging
from dataclasses import dataclass

import rev

from . import spark
from .spark import NeutralMode
from .. import conversions
from ..abstract.flywheel import FlywheelIO, FlywheelIOInputs

logger = logging.getLogger(__name__)

# Closed loop slots: set_velocity uses the first, set_split_velocity the second
SINGLE_SLOT = rev.ClosedLoopSlot.kSlot0
SPLIT_SLOT = rev.ClosedLoopSlot.kSlot1


@dataclass
class SparkMaxFlywheelParameters:
    # Motor rotations per flywheel rotation
    gear_ratio: float

    current_limit: int
    nominal_voltage: float

    neutral_mode: NeutralMode

    kP: float
    kI: float
    kD: float

    invert_leader: bool
    invert_follower: bool


class SparkMaxFlywheelIO(FlywheelIO):
    """
    Flywheel IO for two SPARK MAX controllers (NEO motors) spinning the top (leader) and bottom (follower) rollers.
    Both motors are commanded directly rather than with hardware following so that they can run at different speeds.
    """

    Parameters = SparkMaxFlywheelParameters

    def __init__(self, parameters: SparkMaxFlywheelParameters, leader_id: int = 10, follower_id: int = 11):
        self._params = parameters

        self._leader = rev.SparkMax(leader_id, rev.SparkMax.MotorType.kBrushless)
        self._follower = rev.SparkMax(follower_id, rev.SparkMax.MotorType.kBrushless)
        self._leader_encoder = self._leader.getEncoder()
        self._leader_controller = self._leader.getClosedLoopController()
        self._follower_controller = self._follower.getClosedLoopController()

        self._leader.setCANTimeout(spark.CONFIG_CAN_TIMEOUT)
        self._follower.setCANTimeout(spark.CONFIG_CAN_TIMEOUT)

        self._config()

        self._leader.setCANTimeout(0)
        self._follower.setCANTimeout(0)

        logger.info("Configured flywheel (leader CAN %d, follower CAN %d)", leader_id, follower_id)

    def _config(self):
        for motor, inverted in (
            (self._leader, self._params.invert_leader),
            (self._follower, self._params.invert_follower),
        ):
            settings = spark.base_config(
                self._params.current_limit, self._params.nominal_voltage, inverted, self._params.neutral_mode
            )
            _set_gains(settings, self._params.kP, self._params.kI, self._params.kD)
            spark.apply_config(motor, settings)

    def update_inputs(self, inputs: FlywheelIOInputs):
        inputs.position_rad = conversions.motor_rotations_to_mechanism_radians(
            self._leader_encoder.getPosition(), self._params.gear_ratio
        )
        inputs.velocity_rad_per_sec = conversions.motor_rpm_to_mechanism_radps(
            self._leader_encoder.getVelocity(), self._params.gear_ratio
        )
        inputs.applied_volts = spark.applied_voltage(self._leader)
        inputs.current_amps = [self._leader.getOutputCurrent(), self._follower.getOutputCurrent()]

    def set_voltage(self, volts: float):
        self._leader.setVoltage(volts)
        self._follower.setVoltage(volts)

    def set_velocity(self, velocity: float, ff_volts: float):
        rpm = conversions.mechanism_radps_to_motor_rpm(velocity, self._params.gear_ratio)
        for controller in (self._leader_controller, self._follower_controller):
            controller.setReference(
                rpm,
                rev.SparkMax.ControlType.kVelocity,
                SINGLE_SLOT,
                ff_volts,
                rev.SparkClosedLoopController.ArbFFUnits.kVoltage,
            )

    def set_split_velocity(self, top_velocity: float, top_ff_volts: float, bottom_velocity: float, bottom_ff_volts: float):
        for controller, velocity, ff_volts in (
            (self._leader_controller, top_velocity, top_ff_volts),
            (self._follower_controller, bottom_velocity, bottom_ff_volts),
        ):
            controller.setReference(
                conversions.mechanism_radps_to_motor_rpm(velocity, self._params.gear_ratio),
                rev.SparkMax.ControlType.kVelocity,
                SPLIT_SLOT,
                ff_volts,
                rev.SparkClosedLoopController.ArbFFUnits.kVoltage,
            )

    def stop(self):
        self._leader.stopMotor()
        self._follower.stopMotor()

    def configure_pid(self, kP: float, kI: float, kD: float):
        for motor in (self._leader, self._follower):
            settings = rev.SparkBaseConfig()
            _set_gains(settings, kP, kI, kD)
            spark.apply_config(motor, settings, persist=False)


def _set_gains(settings: rev.SparkBaseConfig, kP: float, kI: float, kD: float):
    # Feedforward is supplied per request as an arbitrary voltage, so the onboard velocity FF stays zero
    for slot in (SINGLE_SLOT, SPLIT_SLOT):
        settings.closedLoop.pidf(kP, kI, kD, 0, slot)


class DummyFlywheelIO(FlywheelIO):
    """Flywheel IO that does nothing. Use it for replay or for a robot without a flywheel."""

    def __init__(self, *args):
        pass

    def update_inputs(self, inputs: FlywheelIOInputs):
        pass

    def set_voltage(self, volts: float):
        pass

    def set_velocity(self, velocity: float, ff_volts: float):
        pass

    def set_split_velocity(self, top_velocity: float, top_ff_volts: float, bottom_velocity: float, bottom_ff_volts: float):
        pass

    def stop(self):
        pass

    def configure_pid(self, kP: float, kI: float, kD: float):
        pass
