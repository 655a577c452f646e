from unittest import mock

import commands2
import pytest
from wpilib.simulation import DriverStationSim

from sparkio import u
from sparkio.impl import flywheel, module, odometry, spark
from sparkio.impl.spark import NeutralMode


@pytest.fixture(autouse=True)
def odometry_thread():
    """A fresh odometry sampler whose notifier and FPGA clock are fakes"""
    fake_wpilib = mock.MagicMock()
    fake_wpilib.Timer.getFPGATimestamp.return_value = 1.5

    odometry.SparkMaxOdometryThread._instance = None
    with mock.patch.object(odometry, "wpilib", fake_wpilib):
        yield odometry.SparkMaxOdometryThread.get_instance()
    odometry.SparkMaxOdometryThread._instance = None


@pytest.fixture
def scheduler():
    commands2.CommandScheduler.resetInstance()
    DriverStationSim.setEnabled(True)
    DriverStationSim.notifyNewData()
    return commands2.CommandScheduler.getInstance()


@pytest.fixture
def fake_rev():
    """
    Stand-in for the REVLib module. Every SparkMax constructed is recorded in ``fake_rev.motors`` by CAN ID, and every
    SparkBaseConfig is a distinct mock so the settings sent to each controller can be inspected.
    """
    rev = mock.MagicMock()
    rev.motors = {}

    def make_motor(can_id, motor_type):
        motor = mock.MagicMock(name=f"SparkMax({can_id})")
        motor.getDeviceId.return_value = can_id
        motor.configure.return_value = rev.REVLibError.kOk
        motor.getLastError.return_value = rev.REVLibError.kOk
        rev.motors[can_id] = motor
        return motor

    rev.SparkMax.side_effect = make_motor
    rev.SparkBaseConfig.side_effect = lambda: mock.MagicMock(name="SparkBaseConfig")

    with (
        mock.patch.object(spark, "rev", rev),
        mock.patch.object(module, "rev", rev),
        mock.patch.object(flywheel, "rev", rev),
        mock.patch.object(odometry, "rev", rev),
    ):
        yield rev


@pytest.fixture
def module_params() -> module.SparkMaxModuleParameters:
    return module.SparkMaxModuleParameters(
        drive_gear_ratio=(45 / 15) * (16 / 50) * (62 / 12),
        turn_gear_ratio=73 / 18,
        drive_current_limit=60,
        turn_current_limit=40,
        nominal_voltage=12.0,
        drive_neutral_mode=NeutralMode.BRAKE,
        turn_neutral_mode=NeutralMode.BRAKE,
        drive_kP=2.0,
        drive_kI=0.0,
        drive_kD=0.0,
        turn_kP=0.05,
        turn_kI=0.0,
        turn_kD=0.0,
        turn_kFF=0.12,
        invert_drive_motor=False,
        invert_turn_motor=True,
        encoder_measurement_period=10 * u.ms,
        encoder_average_depth=2,
    )


@pytest.fixture
def flywheel_params() -> flywheel.SparkMaxFlywheelParameters:
    return flywheel.SparkMaxFlywheelParameters(
        gear_ratio=1,
        current_limit=40,
        nominal_voltage=12.0,
        neutral_mode=NeutralMode.BRAKE,
        kP=0.0001,
        kI=0.000001,
        kD=0.0,
        invert_leader=True,
        invert_follower=False,
    )
