import commands2.button
from commands2.sysid import SysIdRoutine
import wpilib
from wpimath.geometry import Translation2d

from constants import PHYS, MECH, ELEC, OP, SW
from sparkio import SwerveDrive, Flywheel
from sparkio.impl import AnalogAbsoluteEncoder, SparkMaxFlywheelIO, SparkMaxModuleIO
from sparkio.system import SwerveModule


class RobotContainer:
    def __init__(self):
        field_relative = True

        module_params = SparkMaxModuleIO.Parameters(
            drive_gear_ratio=MECH.drive_gear_ratio,
            turn_gear_ratio=MECH.turn_gear_ratio,
            drive_current_limit=ELEC.drive_current_limit,
            turn_current_limit=ELEC.turn_current_limit,
            nominal_voltage=ELEC.nominal_voltage,
            drive_neutral_mode=OP.drive_neutral,
            turn_neutral_mode=OP.turn_neutral,
            drive_kP=SW.drive_kP,
            drive_kI=SW.drive_kI,
            drive_kD=SW.drive_kD,
            turn_kP=SW.turn_kP,
            turn_kI=SW.turn_kI,
            turn_kD=SW.turn_kD,
            turn_kFF=SW.turn_kFF,
            invert_drive_motor=MECH.drive_motor_inverted,
            invert_turn_motor=MECH.turn_motor_inverted,
            encoder_measurement_period=ELEC.encoder_measurement_period,
            encoder_average_depth=ELEC.encoder_average_depth,
        )

        # When defining module positions for kinematics, +x values represent moving toward the front of the robot, and
        # +y values represent moving toward the left of the robot
        placements = {
            "FrontLeft": Translation2d(PHYS.wheel_base / 2, PHYS.track_width / 2),
            "FrontRight": Translation2d(PHYS.wheel_base / 2, -PHYS.track_width / 2),
            "BackLeft": Translation2d(-PHYS.wheel_base / 2, PHYS.track_width / 2),
            "BackRight": Translation2d(-PHYS.wheel_base / 2, -PHYS.track_width / 2),
        }

        modules = tuple(
            SwerveModule(
                SparkMaxModuleIO(
                    index,
                    module_params,
                    AnalogAbsoluteEncoder(ELEC.absolute_encoder_channels[index]),
                    SW.absolute_encoder_offsets[index],
                ),
                name,
                placement,
                PHYS.wheel_radius,
            )
            for index, (name, placement) in enumerate(placements.items())
        )

        # No gyro on this robot, heading is integrated from module motion
        self.swerve = SwerveDrive(modules, None, OP.max_speed, OP.max_angular_velocity)

        flywheel_params = SparkMaxFlywheelIO.Parameters(
            gear_ratio=MECH.flywheel_gear_ratio,
            current_limit=ELEC.flywheel_current_limit,
            nominal_voltage=ELEC.nominal_voltage,
            neutral_mode=OP.flywheel_neutral,
            kP=SW.flywheel_kP,
            kI=SW.flywheel_kI,
            kD=SW.flywheel_kD,
            invert_leader=MECH.flywheel_leader_inverted,
            invert_follower=MECH.flywheel_follower_inverted,
        )
        self.flywheel = Flywheel(
            SparkMaxFlywheelIO(flywheel_params, ELEC.flywheel_leader_CAN_ID, ELEC.flywheel_follower_CAN_ID),
            SW.flywheel_kS,
            SW.flywheel_kV,
        )

        self.stick = commands2.button.CommandXboxController(0)

        self.swerve.setDefaultCommand(
            self.swerve.teleop_command(
                lambda: deadband(-self.stick.getLeftY(), 0.05),
                lambda: deadband(-self.stick.getLeftX(), 0.05),
                lambda: deadband(-self.stick.getRightX(), 0.1),  # Invert for CCW+
                field_relative,
            )
        )

        self.stick.x().onTrue(commands2.InstantCommand(self.swerve.stop_with_x, self.swerve))
        self.stick.a().whileTrue(self.flywheel.run_velocity_command(lambda: OP.flywheel_speed_rpm))

        wpilib.SmartDashboard.putData("Swerve", self.swerve)

    def get_autonomous_command(self):
        # Characterize the flywheel when no other routine is selected
        return self.flywheel.sys_id_quasistatic(SysIdRoutine.Direction.kForward)


def deadband(value, band):
    return value if abs(value) > band else 0
