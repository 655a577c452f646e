"""
Background sampler that reads SPARK MAX encoder positions faster than the main robot loop.

Samples are buffered in bounded queues and drained by the IO layers on their next update, which lets the drive
replay every sample into its pose estimator instead of only the latest one.
"""

import logging
import threading
from collections import deque
from typing import Callable, Optional

import rev
import wpilib

logger = logging.getLogger(__name__)

ODOMETRY_FREQUENCY = 250.0  # Hz
QUEUE_CAPACITY = 20

# Held while a sample is taken and while consumers drain their queues, so a drain always sees whole samples
odometry_lock = threading.Lock()


class SparkMaxOdometryThread:
    """Process-wide odometry sampler. Use get_instance() rather than constructing it directly."""

    _instance: Optional["SparkMaxOdometryThread"] = None

    @classmethod
    def get_instance(cls) -> "SparkMaxOdometryThread":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def __init__(self):
        self._signals: list[Callable[[], float]] = []
        self._queues: list[deque[float]] = []
        self._timestamp_queues: list[deque[float]] = []
        self._devices: list[rev.SparkMax] = []
        self._started = False

        self._notifier = wpilib.Notifier(self.sample)
        self._notifier.setName("SparkMaxOdometryThread")

    def start(self):
        """Begin sampling. Does nothing until at least one timestamp queue exists, or if already running."""
        if self._started or not self._timestamp_queues:
            return

        self._notifier.startPeriodic(1 / ODOMETRY_FREQUENCY)
        self._started = True
        logger.info("Sampling %d odometry signals at %.0f Hz", len(self._signals), ODOMETRY_FREQUENCY)

    def stop(self):
        self._notifier.stop()
        self._started = False

    @property
    def running(self) -> bool:
        return self._started

    def register_signal(self, signal: Callable[[], float], device: Optional[rev.SparkMax] = None) -> deque[float]:
        """
        Sample a value on every tick

        :param signal: Method returning the value to sample, e.g. an encoder's getPosition
        :param device: The SPARK MAX that produces the value. Ticks where it reports an error are discarded.
        :return: Queue receiving one value per accepted tick
        """
        with odometry_lock:
            return self._add_signal(signal, device)

    def make_timestamp_queue(self) -> deque[float]:
        """:return: Queue receiving the FPGA timestamp (seconds) of every accepted tick"""
        with odometry_lock:
            return self._add_timestamp_queue()

    def register_signals(
        self, *signals: tuple[Callable[[], float], Optional[rev.SparkMax]]
    ) -> tuple[deque[float], list[deque[float]]]:
        """
        Make a timestamp queue and register several signals in one step, so no tick lands between them

        :param signals: (signal, device) pairs, as passed to register_signal
        :return: The timestamp queue and one value queue per signal, in order
        """
        with odometry_lock:
            timestamps = self._add_timestamp_queue()
            queues = [self._add_signal(signal, device) for signal, device in signals]
        return timestamps, queues

    # Callers of the _add helpers hold odometry_lock

    def _add_signal(self, signal: Callable[[], float], device: Optional[rev.SparkMax]) -> deque[float]:
        queue: deque[float] = deque(maxlen=QUEUE_CAPACITY)
        self._signals.append(signal)
        self._queues.append(queue)
        if device is not None and not any(device is known for known in self._devices):
            self._devices.append(device)
        return queue

    def _add_timestamp_queue(self) -> deque[float]:
        queue: deque[float] = deque(maxlen=QUEUE_CAPACITY)
        self._timestamp_queues.append(queue)
        return queue

    def sample(self):
        """Read every registered signal once. Called by the notifier at ODOMETRY_FREQUENCY."""
        with odometry_lock:
            timestamp = wpilib.Timer.getFPGATimestamp()
            values = [signal() for signal in self._signals]

            # Drop the whole tick so every queue stays aligned with the timestamp queues
            if any(device.getLastError() != rev.REVLibError.kOk for device in self._devices):
                return

            for queue, value in zip(self._queues, values):
                _offer(queue, value)
            for queue in self._timestamp_queues:
                _offer(queue, timestamp)


def _offer(queue: deque[float], value: float):
    # A full queue rejects new values instead of evicting old ones
    if len(queue) < queue.maxlen:
        queue.append(value)


def drain(queue: deque[float]) -> list[float]:
    """Remove and return every value in a queue. Callers must hold odometry_lock."""
    values = list(queue)
    queue.clear()
    return values
