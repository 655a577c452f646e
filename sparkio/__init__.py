"""
SPARK MAX hardware IO layers for a coaxial swerve drivetrain and a dual-motor flywheel.
Includes the odometry sampling thread and thin subsystems that consume the IO layers.
"""

__all__ = ["u", "SwerveDrive", "Flywheel"]

# fmt: off

# Initialize the unit registry before importing anything that relies on it
from pint import UnitRegistry
u = UnitRegistry()

from .subsystem import SwerveDrive, Flywheel
