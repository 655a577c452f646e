"""
Contains SPARK MAX implementations of the IO layers and sensors. The user should instantiate these when
creating their drive base and flywheel.
"""

__all__ = [
    "ODOMETRY_FREQUENCY",
    "SparkMaxOdometryThread",
    "NeutralMode",
    "SparkMaxModuleIO",
    "DummyModuleIO",
    "SparkMaxFlywheelIO",
    "DummyFlywheelIO",
    "AnalogAbsoluteEncoder",
    "AbsoluteDutyCycleEncoder",
    "Pigeon2Gyro",
]

from .odometry import ODOMETRY_FREQUENCY, SparkMaxOdometryThread
from .spark import NeutralMode
from .module import SparkMaxModuleIO, DummyModuleIO
from .flywheel import SparkMaxFlywheelIO, DummyFlywheelIO
from .sensor import AnalogAbsoluteEncoder, AbsoluteDutyCycleEncoder, Pigeon2Gyro
