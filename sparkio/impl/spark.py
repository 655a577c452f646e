"""Configuration helpers shared by the SPARK MAX IO implementations"""

import logging
from enum import IntEnum

import rev

logger = logging.getLogger(__name__)

# Blocking timeout (ms) used while configuring so that errors are reported
CONFIG_CAN_TIMEOUT = 250


class NeutralMode(IntEnum):
    COAST = 0
    BRAKE = 1


def base_config(
    current_limit: int, nominal_voltage: float, inverted: bool, neutral_mode: NeutralMode
) -> rev.SparkBaseConfig:
    settings = rev.SparkBaseConfig()

    settings.smartCurrentLimit(current_limit)
    settings.voltageCompensation(nominal_voltage)
    settings.inverted(inverted)

    # Convert generic neutral mode to REV IdleMode
    settings.setIdleMode(rev.SparkBaseConfig.IdleMode(neutral_mode))

    return settings


def apply_config(motor: rev.SparkMax, settings: rev.SparkBaseConfig, persist: bool = True) -> rev.REVLibError:
    """
    Send a configuration to a SPARK MAX

    :param motor: The controller to configure
    :param settings: Settings to apply on top of the controller's current configuration
    :param persist: If True, reset to factory-safe parameters first and burn the result to flash (startup).
           If False, change the live configuration only (runtime tuning).
    :return: The REVLib status. Errors are logged rather than raised so the robot keeps running.
    """
    if persist:
        error = motor.configure(
            settings,
            rev.SparkMax.ResetMode.kResetSafeParameters,
            rev.SparkMax.PersistMode.kPersistParameters,
        )
    else:
        error = motor.configure(
            settings,
            rev.SparkMax.ResetMode.kNoResetSafeParameters,
            rev.SparkMax.PersistMode.kNoPersistParameters,
        )

    if error != rev.REVLibError.kOk:
        logger.warning("SPARK MAX %d rejected configuration: %s", motor.getDeviceId(), error)

    return error


def set_brake_mode(motor: rev.SparkMax, enable: bool):
    settings = rev.SparkBaseConfig()
    settings.setIdleMode(rev.SparkBaseConfig.IdleMode.kBrake if enable else rev.SparkBaseConfig.IdleMode.kCoast)
    apply_config(motor, settings, persist=False)


def applied_voltage(motor: rev.SparkMax) -> float:
    return motor.getAppliedOutput() * motor.getBusVoltage()
