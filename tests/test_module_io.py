import math
from unittest import mock

import pytest
from wpimath.geometry import Rotation2d

from sparkio.abstract import AbsoluteEncoder, ModuleIOInputs
from sparkio.impl.module import DummyModuleIO, MODULE_CAN_IDS, SparkMaxModuleIO
from sparkio.impl.odometry import odometry_lock

DRIVE_RATIO = (45 / 15) * (16 / 50) * (62 / 12)
TURN_RATIO = 73 / 18


class FixedAbsoluteEncoder(AbsoluteEncoder):
    def __init__(self, position: Rotation2d):
        super().__init__()
        self.position = position

    @property
    def absolute_position(self) -> Rotation2d:
        return self.position


def applied_settings(motor):
    """The SparkBaseConfig of the first configure() call"""
    return motor.configure.call_args_list[0].args[0]


@pytest.mark.parametrize("index", [-1, 4])
def test_invalid_index(fake_rev, module_params, index):
    with pytest.raises(ValueError, match="Invalid module index"):
        SparkMaxModuleIO(index, module_params)
    assert fake_rev.motors == {}


@pytest.mark.parametrize("index", range(4))
def test_can_ids(fake_rev, module_params, index):
    SparkMaxModuleIO(index, module_params)
    assert set(fake_rev.motors) == set(MODULE_CAN_IDS[index])


def test_configuration_is_blocking_then_released(fake_rev, module_params):
    SparkMaxModuleIO(0, module_params)

    for can_id in MODULE_CAN_IDS[0]:
        motor = fake_rev.motors[can_id]
        names = [name for name, _, _ in motor.method_calls]
        assert motor.setCANTimeout.call_args_list == [mock.call(250), mock.call(0)]
        timeouts = [i for i, name in enumerate(names) if name == "setCANTimeout"]
        assert timeouts[0] < names.index("configure") < timeouts[-1]
        motor.configure.assert_called_once_with(
            mock.ANY,
            fake_rev.SparkMax.ResetMode.kResetSafeParameters,
            fake_rev.SparkMax.PersistMode.kPersistParameters,
        )


def test_motor_settings(fake_rev, module_params):
    SparkMaxModuleIO(0, module_params)
    drive = applied_settings(fake_rev.motors[1])
    turn = applied_settings(fake_rev.motors[2])

    drive.smartCurrentLimit.assert_called_once_with(60)
    turn.smartCurrentLimit.assert_called_once_with(40)
    drive.voltageCompensation.assert_called_once_with(12.0)
    turn.voltageCompensation.assert_called_once_with(12.0)
    drive.inverted.assert_called_once_with(False)
    turn.inverted.assert_called_once_with(True)

    drive.closedLoop.pid.assert_called_once_with(2.0, 0.0, 0.0, fake_rev.ClosedLoopSlot.kSlot0)
    turn.closedLoop.pidf.assert_called_once_with(0.05, 0.0, 0.0, 0.12, fake_rev.ClosedLoopSlot.kSlot0)

    for settings in (drive, turn):
        settings.encoder.uvwMeasurementPeriod.assert_called_once_with(10)
        settings.encoder.uvwAverageDepth.assert_called_once_with(2)
        settings.signals.primaryEncoderPositionPeriodMs.assert_called_once_with(4)


def test_encoders_zeroed_without_absolute_encoder(fake_rev, module_params):
    SparkMaxModuleIO(0, module_params)

    fake_rev.motors[1].getEncoder().setPosition.assert_called_once_with(0)
    fake_rev.motors[2].getEncoder().setPosition.assert_called_once_with(pytest.approx(0))


def test_turn_encoder_seeded_from_absolute_encoder(fake_rev, module_params):
    io = SparkMaxModuleIO(1, module_params, FixedAbsoluteEncoder(Rotation2d(1.0)), Rotation2d(0.25))

    expected_rotations = 0.75 / (2 * math.pi) * TURN_RATIO
    fake_rev.motors[4].getEncoder().setPosition.assert_called_once_with(pytest.approx(expected_rotations))
    assert io.turn_absolute_position.radians() == pytest.approx(0.75)


def test_registers_odometry_signals(fake_rev, module_params, odometry_thread):
    SparkMaxModuleIO(0, module_params)

    assert len(odometry_thread._timestamp_queues) == 1
    assert len(odometry_thread._queues) == 2
    assert odometry_thread._devices == [fake_rev.motors[1], fake_rev.motors[2]]


def test_update_inputs(fake_rev, module_params):
    io = SparkMaxModuleIO(0, module_params)
    drive, turn = fake_rev.motors[1], fake_rev.motors[2]

    # One wheel rotation at one rotation per second
    drive.getEncoder().getPosition.return_value = DRIVE_RATIO
    drive.getEncoder().getVelocity.return_value = 60 * DRIVE_RATIO
    drive.getAppliedOutput.return_value = 0.5
    drive.getBusVoltage.return_value = 12.0
    drive.getOutputCurrent.return_value = 30.0

    # A quarter turn of the wheel
    turn.getEncoder().getPosition.return_value = TURN_RATIO / 4
    turn.getEncoder().getVelocity.return_value = -60 * TURN_RATIO
    turn.getAppliedOutput.return_value = -0.25
    turn.getBusVoltage.return_value = 12.0
    turn.getOutputCurrent.return_value = 5.0

    inputs = ModuleIOInputs()
    with odometry_lock:
        io.update_inputs(inputs)

    assert inputs.drive_position_rad == pytest.approx(2 * math.pi)
    assert inputs.drive_velocity_rad_per_sec == pytest.approx(2 * math.pi)
    assert inputs.drive_applied_volts == pytest.approx(6.0)
    assert inputs.drive_current_amps == [30.0]
    assert inputs.turn_position.radians() == pytest.approx(math.pi / 2)
    assert inputs.turn_velocity_rad_per_sec == pytest.approx(-2 * math.pi)
    assert inputs.turn_applied_volts == pytest.approx(-3.0)
    assert inputs.turn_current_amps == [5.0]
    assert inputs.turn_absolute_position.radians() == 0


def test_update_inputs_drains_odometry_samples(fake_rev, module_params, odometry_thread):
    io = SparkMaxModuleIO(0, module_params)
    drive_encoder = fake_rev.motors[1].getEncoder()
    turn_encoder = fake_rev.motors[2].getEncoder()

    drive_encoder.getPosition.return_value = DRIVE_RATIO / 2
    turn_encoder.getPosition.return_value = 0.0
    odometry_thread.sample()
    drive_encoder.getPosition.return_value = DRIVE_RATIO
    turn_encoder.getPosition.return_value = TURN_RATIO / 2
    odometry_thread.sample()

    inputs = ModuleIOInputs()
    with odometry_lock:
        io.update_inputs(inputs)

    assert inputs.odometry_timestamps == [1.5, 1.5]
    assert inputs.odometry_drive_positions_rad == pytest.approx([math.pi, 2 * math.pi])
    assert [angle.radians() for angle in inputs.odometry_turn_positions] == pytest.approx([0, math.pi])

    with odometry_lock:
        io.update_inputs(inputs)
    assert inputs.odometry_timestamps == []
    assert inputs.odometry_drive_positions_rad == []


def test_silent_module_reports_zeros_but_drains(fake_rev, module_params, odometry_thread):
    io = SparkMaxModuleIO(0, module_params, report=False)
    fake_rev.motors[1].getEncoder().getPosition.return_value = DRIVE_RATIO
    fake_rev.motors[2].getEncoder().getPosition.return_value = 0.0
    odometry_thread.sample()

    inputs = ModuleIOInputs(drive_position_rad=5.0)
    with odometry_lock:
        io.update_inputs(inputs)

    assert inputs.drive_position_rad == 0
    assert inputs.drive_current_amps == [0.0]
    assert inputs.turn_position.radians() == 0
    assert inputs.odometry_drive_positions_rad == pytest.approx([2 * math.pi])


def test_set_target_velocity(fake_rev, module_params):
    io = SparkMaxModuleIO(0, module_params)
    io.set_target_velocity(2 * math.pi)

    fake_rev.motors[1].getClosedLoopController().setReference.assert_called_once_with(
        pytest.approx(60 * DRIVE_RATIO), fake_rev.SparkMax.ControlType.kVelocity
    )


def test_set_turn_position(fake_rev, module_params):
    io = SparkMaxModuleIO(0, module_params)
    io.set_turn_position(math.pi)

    fake_rev.motors[2].getClosedLoopController().setReference.assert_called_once_with(
        pytest.approx(TURN_RATIO / 2), fake_rev.SparkMax.ControlType.kPosition
    )


def test_set_voltages(fake_rev, module_params):
    io = SparkMaxModuleIO(0, module_params)
    io.set_drive_voltage(4.0)
    io.set_turn_voltage(-2.0)

    fake_rev.motors[1].setVoltage.assert_called_once_with(4.0)
    fake_rev.motors[2].setVoltage.assert_called_once_with(-2.0)


def test_brake_mode_changes_live_configuration(fake_rev, module_params):
    io = SparkMaxModuleIO(0, module_params)
    io.set_drive_brake_mode(False)
    io.set_turn_brake_mode(True)

    drive, turn = fake_rev.motors[1], fake_rev.motors[2]
    drive_settings, reset, persist = drive.configure.call_args.args
    drive_settings.setIdleMode.assert_called_once_with(fake_rev.SparkBaseConfig.IdleMode.kCoast)
    assert reset is fake_rev.SparkMax.ResetMode.kNoResetSafeParameters
    assert persist is fake_rev.SparkMax.PersistMode.kNoPersistParameters
    turn.configure.call_args.args[0].setIdleMode.assert_called_once_with(fake_rev.SparkBaseConfig.IdleMode.kBrake)


def test_dummy_module_leaves_inputs_untouched():
    io = DummyModuleIO()
    inputs = ModuleIOInputs(drive_position_rad=3.0)
    io.update_inputs(inputs)
    io.set_target_velocity(1.0)

    assert inputs.drive_position_rad == 3.0


def test_odometry_queues_registered_together(fake_rev, module_params, odometry_thread):
    lock = mock.MagicMock()
    with mock.patch("sparkio.impl.odometry.odometry_lock", lock):
        io = SparkMaxModuleIO(0, module_params)

    assert lock.__enter__.call_count == 1
    [timestamps] = odometry_thread._timestamp_queues
    drive, turn = odometry_thread._queues
    assert timestamps is io._timestamp_queue
    assert drive is io._drive_position_queue
    assert turn is io._turn_position_queue
