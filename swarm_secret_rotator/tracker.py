# -*- coding: utf-8 -*-
"""Tracking table of swarm secrets handed out by the driver.

Only a fingerprint of each value is kept. The table is shared by the request
handlers and the rotation thread so every read hands back copies.
"""

import hashlib
import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime

import pytz


def fingerprint(value):
    """
    sha256 hex digest of a secret value
    :param value: bytes or str
    :return: str
    """
    if isinstance(value, str):
        value = value.encode("utf-8")
    return hashlib.sha256(value).hexdigest()


@dataclass
class SecretInfo:
    secret_name: str
    secret_path: str
    secret_field: str
    provider: str
    last_hash: str
    service_names: list = field(default_factory=list)
    last_updated: datetime = None
    current_secret_name: str = None

    def __post_init__(self):
        if self.current_secret_name is None:
            self.current_secret_name = self.secret_name
        if self.last_updated is None:
            self.last_updated = datetime.now(pytz.utc)

    def copy(self):
        return replace(self, service_names=list(self.service_names))


class SecretTracker:
    """Concurrency safe table of tracked secrets keyed by swarm secret name.

    The lock is only ever held for dictionary work, never around backend or
    swarm calls, so registration from `Get` is not blocked by a slow rotation
    cycle.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self._secrets = {}

    def track(self, name, path, field_name, service_name, value, provider=""):
        """Insert or refresh a tracked secret.

        Args:
            name (str): The swarm secret name.
            path (str): The backend path the value was read from.
            field_name (str): The field extracted from the backend record.
            service_name (str): The service that requested the secret, may be empty.
            value (bytes): The value delivered to swarm, only its hash is kept.
            provider (str): Name of the provider that owns the path.

        Returns:
            SecretInfo: A copy of the tracked entry after the update.
        """
        value_hash = fingerprint(value)
        now = datetime.now(pytz.utc)

        with self.lock:
            existing = self._secrets.get(name)
            if existing is None:
                existing = SecretInfo(secret_name=name,
                                      secret_path=path,
                                      secret_field=field_name,
                                      provider=provider,
                                      last_hash=value_hash,
                                      service_names=[service_name] if service_name else [],
                                      last_updated=now)
                self._secrets[name] = existing
            else:
                if service_name and service_name not in existing.service_names:
                    existing.service_names.append(service_name)
                existing.last_hash = value_hash
                existing.last_updated = now
            tracked = existing.copy()

        logging.getLogger(__name__).info(
            f"Tracking secret: {name} -> {path} (services: {tracked.service_names})")
        return tracked

    def snapshot(self):
        """Copies of every tracked entry in insertion order."""
        with self.lock:
            return [info.copy() for info in self._secrets.values()]

    def get(self, name):
        with self.lock:
            info = self._secrets.get(name)
            return info.copy() if info else None

    def update_after_rotation(self, name, new_hash, current_secret_name=None):
        """Record the fingerprint of a value that was just propagated to swarm.

        Returns:
            bool: False if the name is no longer tracked.
        """
        with self.lock:
            info = self._secrets.get(name)
            if info is None:
                return False
            info.last_hash = new_hash
            info.last_updated = datetime.now(pytz.utc)
            if current_secret_name:
                info.current_secret_name = current_secret_name
            return True

    def __len__(self):
        with self.lock:
            return len(self._secrets)

    def __contains__(self, name):
        with self.lock:
            return name in self._secrets
