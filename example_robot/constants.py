"""
This file defines constants related to your robot.  These constants include:

 * Physical constants (wheelbase, wheel size)

 * Mechanical constants (gear reduction ratios, motor inversion)

 * Electrical constants (current limits, CAN bus IDs, analog channels)

 * Operation constants (desired max velocity, neutral modes)

 * Software constants (PID and feedforward gains)
"""

from collections import namedtuple

from wpimath.geometry import Rotation2d

from sparkio import u
from sparkio.impl import NeutralMode

# Physical constants
phys_data = {
    "track_width": (21.73 * u.inch).m_as(u.m),
    "wheel_base": (21.73 * u.inch).m_as(u.m),
    "wheel_radius": 2 * u.inch,
}
PHYS = namedtuple("Data", phys_data.keys())(**phys_data)

# Mechanical constants
mech_data = {
    # Motor rotations per wheel rotation, wheel to vertical to turn part to belt low
    "drive_gear_ratio": (45 / 15) * (16 / 50) * (62 / 12),
    "turn_gear_ratio": 73 / 18,
    "flywheel_gear_ratio": 1,

    "drive_motor_inverted": False,
    "turn_motor_inverted": True,
    "flywheel_leader_inverted": True,
    "flywheel_follower_inverted": False,
}
MECH = namedtuple("Data", mech_data.keys())(**mech_data)

# Electrical constants
elec_data = {
    # These current limit parameters are per-motor
    "drive_current_limit": 60,
    "turn_current_limit": 40,
    "flywheel_current_limit": 40,
    "nominal_voltage": 12.0,

    # Hall sensor velocity filtering
    "encoder_measurement_period": 10 * u.ms,
    "encoder_average_depth": 2,

    "flywheel_leader_CAN_ID": 10,
    "flywheel_follower_CAN_ID": 11,

    # Absolute encoders plugged into the RIO's analog inputs, in module order
    "absolute_encoder_channels": (0, 1, 2, 3),
}
ELEC = namedtuple("Data", elec_data.keys())(**elec_data)

# Operation constants
op_data = {
    # These maximum parameters reflect the maximum physically possible, not the
    # desired maximum limit.
    "max_speed": 4.5 * (u.m / u.s),
    "max_angular_velocity": 11.5 * (u.rad / u.s),

    "drive_neutral": NeutralMode.BRAKE,
    "turn_neutral": NeutralMode.BRAKE,
    "flywheel_neutral": NeutralMode.BRAKE,

    "flywheel_speed_rpm": 1500.0,
}
OP = namedtuple("Data", op_data.keys())(**op_data)

# Software constants
sw_data = {
    "drive_kP": 2.0,
    "drive_kI": 0.0,
    "drive_kD": 0.0,

    "turn_kP": 0.05,
    "turn_kI": 0.0,
    "turn_kD": 0.0,
    "turn_kFF": 0.12,

    "flywheel_kP": 0.0001,
    "flywheel_kI": 0.000001,
    "flywheel_kD": 0.0,
    "flywheel_kS": 0.0,
    "flywheel_kV": 0.0,

    # Absolute encoder readings with the wheels pointed forward. MUST BE CALIBRATED
    "absolute_encoder_offsets": (
        Rotation2d(0.0),
        Rotation2d(0.0),
        Rotation2d(0.0),
        Rotation2d(0.0),
    ),
}
SW = namedtuple("Data", sw_data.keys())(**sw_data)
