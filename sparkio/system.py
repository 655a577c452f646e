from pint import Quantity
from wpimath.geometry import Rotation2d, Translation2d
from wpimath.kinematics import SwerveModulePosition, SwerveModuleState
from wpiutil import Sendable, SendableBuilder

from . import u
from .abstract.module import ModuleIO, ModuleIOInputs

# Below this drive speed (m/s) the wheel holds its angle to prevent feedback-loop jitter
ANGLE_HOLD_SPEED = 0.02


class SwerveModule(Sendable):
    """
    A swerve module driven through a ModuleIO. Converts the IO's wheel radians into metres and applies
    desired module states.
    """

    def __init__(self, io: ModuleIO, name: str, placement: Translation2d, wheel_radius: Quantity):
        """
        :param io: Hardware layer of the module
        :param name: Name used for telemetry, e.g. "FrontLeft"
        :param placement: Module location relative to the robot center. +X is forward and +Y is left
        :param wheel_radius: Radius of the wheel
        """
        super().__init__()

        self.io = io
        self.name = name
        self.placement = placement
        self.inputs = ModuleIOInputs()
        self._wheel_radius: float = wheel_radius.m_as(u.m)

        self.last_commanded_drive_velocity: float = 0
        self.last_commanded_azimuth_angle = Rotation2d()

        # Positions sampled by the odometry thread during the last update, oldest first
        self.odometry_positions: tuple[SwerveModulePosition, ...] = ()

    def update_inputs(self):
        """Read sensors. The drive calls this while holding the odometry lock."""
        self.io.update_inputs(self.inputs)

    def periodic(self):
        self.odometry_positions = tuple(
            SwerveModulePosition(position_rad * self._wheel_radius, angle)
            for position_rad, angle in zip(self.inputs.odometry_drive_positions_rad, self.inputs.odometry_turn_positions)
        )

    def desire_state(self, state: SwerveModuleState, rotate_in_place: bool = True) -> SwerveModuleState:
        """
        Command the module to follow a speed and angle

        :param state: SwerveModuleState representing the module's desired speed and angle
        :param rotate_in_place: Whether the module will rotate while not driving. Set False to prevent wheels from
        wearing down by spinning in place
        :return: The optimized state that was applied
        """
        state = optimize(state, self.angle)
        angle = state.angle if rotate_in_place or abs(state.speed) > ANGLE_HOLD_SPEED else self.angle

        self.last_commanded_drive_velocity = state.speed
        self.last_commanded_azimuth_angle = angle

        self.io.set_turn_position(angle.radians())
        self.io.set_target_velocity(state.speed / self._wheel_radius)

        return SwerveModuleState(state.speed, angle)

    def run_characterization(self, volts: float):
        """Lock the wheel facing forward and drive it at a voltage. For use with SysId characterization"""
        self.io.set_turn_position(0)
        self.io.set_drive_voltage(volts)

    def stop(self):
        self.io.set_turn_voltage(0)
        self.io.set_drive_voltage(0)

    def set_brake_mode(self, enabled: bool):
        self.io.set_drive_brake_mode(enabled)
        self.io.set_turn_brake_mode(enabled)

    @property
    def angle(self) -> Rotation2d:
        """CCW+ wheel angle"""
        return self.inputs.turn_position

    @property
    def drive_distance(self) -> float:
        """Driven distance in metres"""
        return self.inputs.drive_position_rad * self._wheel_radius

    @property
    def drive_velocity(self) -> float:
        """Drive wheel velocity in m/s"""
        return self.inputs.drive_velocity_rad_per_sec * self._wheel_radius

    @property
    def drive_voltage(self) -> float:
        return self.inputs.drive_applied_volts

    @property
    def characterization_velocity(self) -> float:
        """Drive wheel velocity in rad/s"""
        return self.inputs.drive_velocity_rad_per_sec

    @property
    def odometry_timestamps(self) -> list[float]:
        return self.inputs.odometry_timestamps

    @property
    def module_position(self) -> SwerveModulePosition:
        """The swerve module's driven distance (in metres) and facing angle"""
        return SwerveModulePosition(self.drive_distance, self.angle)

    @property
    def module_state(self) -> SwerveModuleState:
        """The swerve module's current velocity (in metres/sec) and facing angle"""
        return SwerveModuleState(self.drive_velocity, self.angle)

    def initSendable(self, builder: SendableBuilder):
        # fmt: off
        builder.setSmartDashboardType("SwerveModule")
        builder.addDoubleProperty("Drive Velocity (mps)", lambda: self.drive_velocity, lambda _: None)
        builder.addDoubleProperty("Drive Distance (m)", lambda: self.drive_distance, lambda _: None)
        builder.addDoubleProperty("Drive Voltage", lambda: self.inputs.drive_applied_volts, lambda _: None)
        builder.addDoubleArrayProperty("Drive Current (A)", lambda: self.inputs.drive_current_amps, lambda _: None)
        builder.addDoubleProperty("Turn Velocity (radps)", lambda: self.inputs.turn_velocity_rad_per_sec, lambda _: None)
        builder.addDoubleProperty("Turn Position (rad)", lambda: self.angle.radians(), lambda _: None)
        builder.addDoubleProperty("Turn Position (deg)", lambda: self.angle.degrees(), lambda _: None)
        builder.addDoubleProperty("Turn Absolute Position (rad)", lambda: self.inputs.turn_absolute_position.radians(), lambda _: None)
        builder.addDoubleProperty("Turn Voltage", lambda: self.inputs.turn_applied_volts, lambda _: None)
        builder.addDoubleArrayProperty("Turn Current (A)", lambda: self.inputs.turn_current_amps, lambda _: None)
        builder.addDoubleProperty("Desired Drive Velocity (mps)", lambda: self.last_commanded_drive_velocity, lambda _: None)
        builder.addDoubleProperty("Desired Turn Position (deg)", lambda: self.last_commanded_azimuth_angle.degrees(), lambda _: None)
        # fmt: on


def sign(num):
    return 1 if num > 0 else -1 if num < 0 else 0


def place_in_proper_0_to_360_scope(scope_reference: float, new_angle: float) -> float:
    # Place the new_angle in the range that is a multiple of [0, 360] (e.g., [360, 720]) which is closest
    # to the scope_reference
    lower_offset = scope_reference % 360
    lower_bound = scope_reference - lower_offset
    upper_bound = lower_bound + 360

    while new_angle < lower_bound:
        new_angle += 360
    while new_angle > upper_bound:
        new_angle -= 360

    if new_angle - scope_reference > 180:
        new_angle -= 360
    elif new_angle - scope_reference < -180:
        new_angle += 360

    return new_angle


def optimize(desired_state: SwerveModuleState, current_angle: Rotation2d):
    # There are two ways for a swerve module to reach its goal
    # 1) Rotate to its intended rotation and drive at its intended speed
    # 2) Rotate to the mirrored rotation (subtract 180) and drive at the opposite of its intended speed
    # Optimizing finds the option that requires the smallest rotation by the module

    target_angle = place_in_proper_0_to_360_scope(current_angle.degrees(), desired_state.angle.degrees())
    target_speed = desired_state.speed
    delta = target_angle - current_angle.degrees()

    if abs(delta) > 90:
        target_speed *= -1
        target_angle -= 180 * sign(delta)

    return SwerveModuleState(target_speed, Rotation2d.fromDegrees(target_angle))
