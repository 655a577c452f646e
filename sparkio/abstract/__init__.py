"""
Contains interfaces for the hardware IO layers (swerve module, flywheel) and sensors used by the subsystems.
Implementations can be found in the impl module, or the user may define their own.
"""

__all__ = [
    "SendableABCMeta",
    "ModuleIOInputs",
    "ModuleIO",
    "FlywheelIOInputs",
    "FlywheelIO",
    "Gyro",
    "AbsoluteEncoder",
]

from abc import ABCMeta
from wpiutil import Sendable


class SendableABCMeta(ABCMeta, type(Sendable)):
    pass


from .module import ModuleIOInputs, ModuleIO
from .flywheel import FlywheelIOInputs, FlywheelIO
from .sensor import Gyro, AbsoluteEncoder
