# You must either:
#   1) Install sparkio into the robot's environment OR
#   2) Copy the sparkio package into the example_robot directory

from typing import Optional

import commands2

from container import RobotContainer


class Robot(commands2.TimedCommandRobot):
    def robotInit(self):
        self.container = RobotContainer()
        self.scheduler = commands2.CommandScheduler.getInstance()
        self.autonomous_command: Optional[commands2.Command] = None

    def disabledInit(self) -> None:
        self.container.swerve.set_brake_mode(False)

    def autonomousInit(self) -> None:
        self.container.swerve.set_brake_mode(True)
        self.autonomous_command = self.container.get_autonomous_command()
        if self.autonomous_command:
            self.autonomous_command.schedule()

    def teleopInit(self) -> None:
        self.container.swerve.set_brake_mode(True)
        if self.autonomous_command:
            self.autonomous_command.cancel()
