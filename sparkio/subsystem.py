"""The drive and flywheel subsystems, which consume the IO layers"""

import logging
from functools import singledispatchmethod
from typing import Callable, Optional, TYPE_CHECKING

import commands2
import wpilib
import wpilib.sysid
import wpimath.estimator
import wpimath.kinematics
from commands2.sysid import SysIdRoutine
from pint import Quantity
from wpimath.controller import SimpleMotorFeedforwardRadians
from wpimath.geometry import Pose2d, Rotation2d, Translation2d
from wpimath.kinematics import ChassisSpeeds, SwerveModulePosition, SwerveModuleState
from wpiutil import SendableBuilder

if TYPE_CHECKING:
    from wpimath.estimator import SwerveDrive4PoseEstimator
    from wpimath.kinematics import SwerveDrive4Kinematics

from . import conversions, u
from .abstract import FlywheelIO, FlywheelIOInputs, Gyro
from .impl.odometry import SparkMaxOdometryThread, odometry_lock
from .system import SwerveModule

logger = logging.getLogger(__name__)


class SwerveDrive(commands2.Subsystem):
    """
    A Subsystem representing the swerve drivetrain.

    Every loop, the module inputs are refreshed and each encoder sample buffered by the odometry thread is replayed
    into the pose estimator with its own timestamp. Without a gyro, heading is integrated from module motion.
    """

    def __init__(
        self,
        modules: tuple[SwerveModule, ...],
        gyro: Optional[Gyro],
        max_velocity: Quantity,
        max_angular_velocity: Quantity,
    ):
        """
        Construct a swerve drivetrain as a Subsystem.

        :param modules: List of swerve modules
        :param gyro: A gyro sensor that provides a CCW+ heading reading of the chassis, or None
        :param max_velocity: The actual maximum velocity of the robot
        :param max_angular_velocity: The actual maximum angular (turning) velocity of the robot
        """

        super().__init__()

        self._modules = modules
        self._gyro = gyro
        self.max_velocity: float = max_velocity.m_as(u.m / u.s)
        self.max_angular_velocity: float = max_angular_velocity.m_as(u.rad / u.s)
        self.period_seconds = 0.02

        if self._gyro is not None:
            # Zero heading at startup to set "forward" direction
            self._gyro.zero_heading()

        self._raw_heading = Rotation2d()
        self._last_module_positions = tuple(SwerveModulePosition() for _ in modules)

        # There are different classes for each number of swerve modules in a drive base,
        # so construct the class name from number of modules.
        self._kinematics: "SwerveDrive4Kinematics" = getattr(
            wpimath.kinematics, f"SwerveDrive{len(modules)}Kinematics"
        )(*[module.placement for module in self._modules])
        self._odometry: "SwerveDrive4PoseEstimator" = getattr(
            wpimath.estimator, f"SwerveDrive{len(modules)}PoseEstimator"
        )(self._kinematics, self._raw_heading, self._last_module_positions, Pose2d())

        for module in modules:
            wpilib.SmartDashboard.putData(f"Module {module.name}", module)

        # Field to plot robot pose
        self.field = wpilib.Field2d()
        wpilib.SmartDashboard.putData(self.field)

        # Create a characterization routine to use with the SysId utility
        self._sysid_routine = SysIdRoutine(
            SysIdRoutine.Config(),
            SysIdRoutine.Mechanism(self.run_characterization, self._sysid_log, self, "drive"),
        )

        # Every module has registered its signals by now
        SparkMaxOdometryThread.get_instance().start()

    def periodic(self):
        with odometry_lock:
            for module in self._modules:
                module.update_inputs()

        for module in self._modules:
            module.periodic()

        if wpilib.DriverStation.isDisabled():
            for module in self._modules:
                module.stop()

        timestamps = self._modules[0].odometry_timestamps
        sample_count = min(len(timestamps), *(len(module.odometry_positions) for module in self._modules))

        for i in range(sample_count):
            positions = tuple(module.odometry_positions[i] for module in self._modules)

            if self._gyro is not None:
                self._raw_heading = self._gyro.heading
            else:
                deltas = tuple(
                    SwerveModulePosition(position.distance - last.distance, position.angle)
                    for position, last in zip(positions, self._last_module_positions)
                )
                twist = self._kinematics.toTwist2d(deltas)
                self._raw_heading = self._raw_heading + Rotation2d(twist.dtheta)

            self._last_module_positions = positions
            self._odometry.updateWithTime(timestamps[i], self._raw_heading, positions)

        # Visualize robot position on field
        self.field.setRobotPose(self.pose)

    @singledispatchmethod
    def drive(self, translation: Translation2d, rotation: float, field_relative: bool):
        """
        Drive the robot at the provided speeds (translation and rotation).

        By default, chassis speeds are discretized on an interval of 20ms.
        If your robot loop has a non-default period, you **must** set this subsystem's ``period_seconds`` field!

        :param translation: Translation speed on the XY-plane in m/s where +X is forward and +Y is left
        :param rotation: Rotation speed around the Z-axis in rad/s where CCW+
        :param field_relative: If True, the estimated field heading is used as the forward direction.
               Else, forward faces the front of the robot.
        """

        speeds = (
            ChassisSpeeds.fromFieldRelativeSpeeds(translation.x, translation.y, rotation, self.heading)
            if field_relative
            else ChassisSpeeds(translation.x, translation.y, rotation)
        )
        speeds = ChassisSpeeds.discretize(speeds, self.period_seconds)
        swerve_module_states = self._kinematics.toSwerveModuleStates(speeds)

        self.desire_module_states(swerve_module_states, rotate_in_place=False)

    @drive.register
    def _(self, chassis_speeds: ChassisSpeeds):
        """
        Alternative method to drive the robot at a set of chassis speeds (exclusively robot-relative).

        :param chassis_speeds: Robot-relative speeds on the XY-plane in m/s where +X is forward and +Y is left
        """

        translation = Translation2d(chassis_speeds.vx, chassis_speeds.vy)
        return self.drive(translation, chassis_speeds.omega, False)

    def desire_module_states(self, states: tuple[SwerveModuleState, ...], rotate_in_place: bool = True):
        """
        Command each individual module to a state (consisting of velocity and rotation)

        :param states: List of module states in the order of the swerve module list SwerveDrive was created with
        :param rotate_in_place: Should the modules rotate while not driving
        """

        swerve_module_states = self._kinematics.desaturateWheelSpeeds(states, self.max_velocity)  # type: ignore

        for module, state in zip(self._modules, swerve_module_states):
            module.desire_state(state, rotate_in_place)

    def stop(self):
        self.drive(ChassisSpeeds())

    def stop_with_x(self):
        """Stop and turn the modules to an X arrangement to resist being pushed"""
        for module in self._modules:
            module.desire_state(SwerveModuleState(0, module.placement.angle()))

    def set_brake_mode(self, enabled: bool):
        for module in self._modules:
            module.set_brake_mode(enabled)

    def run_characterization(self, volts: float):
        """
        Drive all wheels at the specified voltage and lock them forward

        :param volts: Voltage in volts (between -12 and +12 for most FRC motors)
        """
        for module in self._modules:
            module.run_characterization(volts)

    @property
    def characterization_velocity(self) -> float:
        """Average drive wheel velocity in rad/s"""
        return sum(module.characterization_velocity for module in self._modules) / len(self._modules)

    @property
    def module_states(self) -> tuple[SwerveModuleState, ...]:
        """A tuple of the swerve modules' states (wheel velocity and facing rotation)"""
        return tuple(module.module_state for module in self._modules)

    @property
    def module_positions(self) -> tuple[SwerveModulePosition, ...]:
        """A tuple of the swerve modules' positions (driven distance and facing rotation)"""
        return tuple(module.module_position for module in self._modules)

    @property
    def pose(self) -> Pose2d:
        """The robot's pose on the field (position and heading)"""
        return self._odometry.getEstimatedPosition()

    @property
    def heading(self) -> Rotation2d:
        """The robot's facing direction on the field"""
        return self.pose.rotation()

    def reset_odometry(self, pose: Pose2d):
        """
        Reset the drive base's pose to a new one

        :param pose: The new pose
        """

        self._odometry.resetPosition(self._raw_heading, self._last_module_positions, pose)  # type: ignore

    def _sysid_log(self, log: wpilib.sysid.SysIdRoutineLog):
        for module in self._modules:
            (
                log.motor(module.name)
                .voltage(module.drive_voltage)
                .position(module.drive_distance)
                .velocity(module.drive_velocity)
            )

    def teleop_command(
        self,
        translation: Callable[[], float],
        strafe: Callable[[], float],
        rotation: Callable[[], float],
        field_relative: bool,
    ) -> "_TeleOpCommand":
        """
        Construct a command that drives the robot using joystick (or other) inputs

        :param translation: A method that returns the desired +X (forward/backward) velocity as a percentage in [-1, 1]
        :param strafe: A method that returns the desired +Y (left/right) velocity as a percentage in [-1, 1]
        :param rotation: A method that returns the desired CCW+ rotational velocity as a percentage in [-1, 1]
        :param field_relative: If True, the estimated field heading is used as the forward direction.
               Else, forward faces the front of the robot.
        :return: The command
        """
        return _TeleOpCommand(self, translation, strafe, rotation, field_relative)

    def sys_id_quasistatic(self, direction: SysIdRoutine.Direction) -> commands2.Command:
        """
        Run a quasistatic characterization test. The robot will move until this command is cancelled.

        :param direction: The direction the robot will drive
        """
        return self._sysid_routine.quasistatic(direction)

    def sys_id_dynamic(self, direction: SysIdRoutine.Direction) -> commands2.Command:
        """
        Run a dynamic characterization test. The robot will move until this command is cancelled.

        :param direction: The direction the robot will drive
        """
        return self._sysid_routine.dynamic(direction)


class _TeleOpCommand(commands2.Command):
    def __init__(
        self,
        swerve: SwerveDrive,
        translation: Callable[[], float],
        strafe: Callable[[], float],
        rotation: Callable[[], float],
        field_relative: bool,
    ):
        super().__init__()
        self.addRequirements(swerve)
        self.setName("TeleOp Command")

        self._swerve = swerve
        self.translation = translation
        self.strafe = strafe
        self.rotation = rotation
        self.field_relative = field_relative

    def execute(self):
        self._swerve.drive(
            Translation2d(self.translation(), self.strafe()) * self._swerve.max_velocity,
            self.rotation() * self._swerve.max_angular_velocity,
            self.field_relative,
        )

    def end(self, interrupted: bool):
        self._swerve.stop()

    def initSendable(self, builder: SendableBuilder):
        builder.addBooleanProperty(
            "Field Relative", lambda: self.field_relative, lambda val: setattr(self, "field_relative", val)
        )


class Flywheel(commands2.Subsystem):
    """A Subsystem representing a flywheel shooter. Velocities are in RPM of the flywheel."""

    def __init__(self, io: FlywheelIO, kS: float, kV: float, kA: float = 0):
        """
        :param io: Hardware layer of the flywheel
        :param kS: Static gain in volts
        :param kV: Velocity gain in volts per rad/s
        :param kA: Acceleration gain in volts per rad/s²
        """
        super().__init__()

        self._io = io
        self.inputs = FlywheelIOInputs()
        self._feedforward = SimpleMotorFeedforwardRadians(kS, kV, kA)
        self.setpoint_rpm: float = 0

        self._sysid_routine = SysIdRoutine(
            SysIdRoutine.Config(),
            SysIdRoutine.Mechanism(self.run_volts, self._sysid_log, self, "flywheel"),
        )

        wpilib.SmartDashboard.putData("Flywheel", self)

    def periodic(self):
        self._io.update_inputs(self.inputs)

    def run_volts(self, volts: float):
        """Run the flywheel open loop"""
        self.setpoint_rpm = 0
        self._io.set_voltage(volts)

    def run_velocity(self, velocity_rpm: float):
        """Run the flywheel closed loop at a velocity in RPM"""
        self.setpoint_rpm = velocity_rpm
        velocity = conversions.rpm_to_radps(velocity_rpm)
        self._io.set_velocity(velocity, self._feedforward.calculate(velocity))

    def run_split_velocity(self, top_rpm: float, bottom_rpm: float):
        """Run the top and bottom rollers closed loop at different velocities in RPM"""
        self.setpoint_rpm = top_rpm
        top = conversions.rpm_to_radps(top_rpm)
        bottom = conversions.rpm_to_radps(bottom_rpm)
        self._io.set_split_velocity(top, self._feedforward.calculate(top), bottom, self._feedforward.calculate(bottom))

    def stop(self):
        self.setpoint_rpm = 0
        self._io.stop()

    def configure_pid(self, kP: float, kI: float, kD: float):
        logger.info("Flywheel gains changed to kP=%s kI=%s kD=%s", kP, kI, kD)
        self._io.configure_pid(kP, kI, kD)

    @property
    def velocity_rpm(self) -> float:
        return conversions.radps_to_rpm(self.inputs.velocity_rad_per_sec)

    @property
    def characterization_velocity(self) -> float:
        """Flywheel velocity in rad/s"""
        return self.inputs.velocity_rad_per_sec

    def run_velocity_command(self, velocity_rpm: Callable[[], float]) -> commands2.Command:
        """
        Construct a command that tracks the supplied velocity every loop and stops the flywheel when it ends

        :param velocity_rpm: A method that returns the desired velocity in RPM
        """
        return commands2.RunCommand(lambda: self.run_velocity(velocity_rpm()), self).finallyDo(lambda _: self.stop())

    def _sysid_log(self, log: wpilib.sysid.SysIdRoutineLog):
        (
            log.motor("flywheel")
            .voltage(self.inputs.applied_volts)
            .angularPosition(self.inputs.position_rad)
            .angularVelocity(self.inputs.velocity_rad_per_sec)
        )

    def sys_id_quasistatic(self, direction: SysIdRoutine.Direction) -> commands2.Command:
        return self._sysid_routine.quasistatic(direction)

    def sys_id_dynamic(self, direction: SysIdRoutine.Direction) -> commands2.Command:
        return self._sysid_routine.dynamic(direction)

    def initSendable(self, builder: SendableBuilder):
        super().initSendable(builder)
        builder.addDoubleProperty("Velocity (rpm)", lambda: self.velocity_rpm, lambda _: None)
        builder.addDoubleProperty("Setpoint (rpm)", lambda: self.setpoint_rpm, lambda _: None)
        builder.addDoubleProperty("Applied Voltage", lambda: self.inputs.applied_volts, lambda _: None)
