# -*- coding: utf-8 -*-
"""This modules implements the background rotation loop

"""

import logging
import threading
import weakref
from dataclasses import dataclass
from datetime import datetime
from time import monotonic

import pytz

from .exceptions import SecretProviderError, SecretRotatorError


@dataclass
class RotationStats:
    cycles: int = 0
    rotations: int = 0
    rotation_errors: int = 0
    check_errors: int = 0
    last_heartbeat: datetime = None
    last_cycle_seconds: float = 0.0


# we use a thread disconnected from class to ensure background thread
# references don't keep the scheduler it supports alive beyond its natural lifecycle

def _background_rotation_thread(scheduler_weak_ref, stop_event):
    """
    Main background thread driver loop for rotation checks
    :param scheduler_weak_ref: weak reference to the rotation scheduler
    :param stop_event: threading.Event set to stop the loop
    :return: None
    """
    scheduler = scheduler_weak_ref()
    if not scheduler:
        return
    interval = scheduler.interval
    logging.getLogger(__name__).info(f"Secret monitoring started with interval: {interval}s")
    next_run = monotonic() + interval
    del scheduler

    while not stop_event.wait(max(next_run - monotonic(), 0.0)):
        # each loop grab a reference to the object that spawned thread
        scheduler = scheduler_weak_ref()

        # if the object no longer exists exit
        if not scheduler:
            break

        try:
            scheduler.run_cycle()
        except Exception:
            logging.getLogger(__name__).exception("While checking secrets for rotation")

        # ticks missed while the cycle ran are dropped, not queued
        now = monotonic()
        next_run += interval
        if next_run <= now:
            next_run += ((now - next_run) // interval + 1) * interval

        # proactively delete reference
        # so object can be garbage collected during the wait
        del scheduler

    logging.getLogger(__name__).info("Secret monitoring stopped")


class RotationScheduler:
    """Polls tracked secrets and rotates the ones whose backend value changed.

    At most one cycle runs at a time and the stop signal is only looked at
    between cycles, a rotation that has started always runs to its end.
    """

    def __init__(self, providers, tracker, rotator, interval=300.0):
        """
        Args:
            providers (list): SecretsProvider instances, matched to tracked
                entries by provider name.
            tracker (SecretTracker): The tracked secrets.
            rotator (SecretRotator): Runs the rotation of a changed secret.
            interval (float): Seconds between cycles.
        """
        assert interval > 0, "Rotation interval must be positive"
        self._providers = {provider.name: provider for provider in providers}
        self._tracker = tracker
        self._rotator = rotator
        self._interval = float(interval)
        self._stop_event = threading.Event()
        self._cycle_lock = threading.Lock()
        self._thread = None
        self.stats = RotationStats()

    @property
    def interval(self):
        return self._interval

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self._stop_event = threading.Event()
        t = threading.Thread(target=_background_rotation_thread,
                             name="secret_rotation",
                             args=[weakref.ref(self), self._stop_event])
        t.daemon = True
        t.start()
        self._thread = t

    def stop(self, timeout=None):
        """Signal the loop to exit and wait for an in flight cycle to finish."""
        self._stop_event.set()
        t = self._thread
        if t is not None and t is not threading.current_thread():
            t.join(timeout)
        self._thread = None

    def run_cycle(self):
        """Check every tracked secret once.

        Returns:
            list: Names of the secrets that were rotated.
        """
        with self._cycle_lock:
            started = monotonic()
            rotated = []
            snapshot = self._tracker.snapshot()
            if not snapshot:
                logging.getLogger(__name__).debug("No secrets to monitor")
            else:
                logging.getLogger(__name__).info(
                    f"Checking {len(snapshot)} tracked secrets for changes")

            for secret_info in snapshot:
                if self._check_and_rotate(secret_info):
                    rotated.append(secret_info.secret_name)

            self.stats.cycles += 1
            self.stats.last_heartbeat = datetime.now(pytz.utc)
            self.stats.last_cycle_seconds = monotonic() - started
            return rotated

    def _check_and_rotate(self, secret_info):
        name = secret_info.secret_name
        provider = self._providers.get(secret_info.provider)
        if provider is None or not provider.supports_rotation():
            logging.getLogger(__name__).debug(
                f"Skipping {name}, provider {secret_info.provider} does not support rotation")
            return False

        try:
            changed = provider.check_secret_changed(secret_info)
        except SecretProviderError as e:
            self.stats.check_errors += 1
            logging.getLogger(__name__).error(f"Error checking secret {name}: {e}")
            return False
        except Exception:
            self.stats.check_errors += 1
            logging.getLogger(__name__).exception(f"While checking secret {name}")
            return False

        if not changed:
            return False

        logging.getLogger(__name__).info(f"Detected change in secret: {name}")
        try:
            self._rotator.rotate_secret(secret_info)
        except SecretRotatorError as e:
            self.stats.rotation_errors += 1
            logging.getLogger(__name__).error(f"Failed to rotate secret {name}: {e}")
            return False
        except Exception:
            self.stats.rotation_errors += 1
            logging.getLogger(__name__).exception(f"While rotating secret {name}")
            return False

        self.stats.rotations += 1
        return True
