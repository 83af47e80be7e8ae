# -*- coding: utf-8 -*-
"""Driver settings read from the environment of the plugin."""

import logging
import math
import os
import re
from dataclasses import dataclass, field

DEFAULT_ROTATION_INTERVAL = 300.0

PROVIDER_SETTING_PREFIXES = ("VAULT_", "OPENBAO_", "AWS_", "AZURE_", "GCP_", "GOOGLE_")

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"([0-9]*\.?[0-9]+)(ns|us|µs|ms|s|m|h)")


def parse_duration(text, default=DEFAULT_ROTATION_INTERVAL):
    """
    Seconds in a duration string such as 30s, 5m or 1h30m
    :param text: duration, a bare number is taken as seconds
    :param default: returned when text is empty, unparsable or not positive
    :return: float seconds
    """
    if not text:
        return default
    text = text.strip()

    try:
        seconds = float(text)
    except ValueError:
        if not re.fullmatch(r"(?:[0-9]*\.?[0-9]+(?:ns|us|µs|ms|s|m|h))+", text):
            logging.getLogger(__name__).warning(
                f"Invalid duration {text!r}, using {default}s")
            return default
        seconds = sum(float(amount) * _DURATION_UNITS[unit]
                      for amount, unit in _DURATION_PART.findall(text))

    if not math.isfinite(seconds) or seconds <= 0:
        return default
    return seconds


def _flag(value, default):
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class DriverConfig:
    provider_type: str = "vault"
    enable_rotation: bool = True
    rotation_interval: float = DEFAULT_ROTATION_INTERVAL
    settings: dict = field(default_factory=dict)


def load_config(environ=None):
    """Build the driver settings from environment variables.

    Args:
        environ (dict, optional): Defaults to `os.environ`.

    Returns:
        DriverConfig
    """
    if environ is None:
        environ = os.environ

    enable_rotation = environ.get("ENABLE_ROTATION", environ.get("VAULT_ENABLE_ROTATION"))
    rotation_interval = environ.get("ROTATION_INTERVAL", environ.get("VAULT_ROTATION_INTERVAL"))

    return DriverConfig(
        provider_type=(environ.get("SECRETS_PROVIDER") or "vault").strip().lower(),
        enable_rotation=_flag(enable_rotation, True),
        rotation_interval=parse_duration(rotation_interval),
        settings={key: value for key, value in environ.items()
                  if key.startswith(PROVIDER_SETTING_PREFIXES)})
