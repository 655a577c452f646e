"""
Methods for converting between native SPARK MAX units (rotations, RPM) and standard units (radians, rad/s).

Gear ratios are expressed as motor rotations per mechanism rotation, so a reduction is greater than one.
"""
import math

RADS_PER_ROTATION = 2 * math.pi
SECONDS_PER_MINUTE = 60


def rotations_to_radians(rotations: float) -> float:
    return rotations * RADS_PER_ROTATION


def radians_to_rotations(radians: float) -> float:
    return radians / RADS_PER_ROTATION


def rpm_to_radps(rpm: float) -> float:
    return rpm * RADS_PER_ROTATION / SECONDS_PER_MINUTE


def radps_to_rpm(radps: float) -> float:
    return radps * SECONDS_PER_MINUTE / RADS_PER_ROTATION


def motor_rotations_to_mechanism_radians(rotations: float, gear_ratio: float) -> float:
    return rotations_to_radians(rotations / gear_ratio)


def mechanism_radians_to_motor_rotations(radians: float, gear_ratio: float) -> float:
    return radians_to_rotations(radians) * gear_ratio


def motor_rpm_to_mechanism_radps(rpm: float, gear_ratio: float) -> float:
    return rpm_to_radps(rpm / gear_ratio)


def mechanism_radps_to_motor_rpm(radps: float, gear_ratio: float) -> float:
    return radps_to_rpm(radps) * gear_ratio
