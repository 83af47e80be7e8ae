# -*- coding: utf-8 -*-
"""swarm_secret_rotator

A docker swarm secrets driver that reads secrets from an external credential store
and, when the value in the store changes, moves every service using the secret onto
a fresh copy of it without downtime.

"""

from swarm_secret_rotator.exceptions import SecretProviderError, \
    ConfigError, \
    AuthError, \
    NotFoundError, \
    NoActiveSecretVersion, \
    FieldNotFoundError, \
    BackendError, \
    ProviderNotImplemented, \
    SecretRotatorError, \
    OrchestratorError, \
    RotationError, \
    SecretObjectNotFound, \
    NewSecretCreateError, \
    PropagationError, \
    CleanupError
from swarm_secret_rotator.tracker import SecretInfo, SecretTracker, fingerprint
from swarm_secret_rotator.providers import SecretRequest, \
    ResolvedSecret, \
    SecretsProvider, \
    VaultProvider, \
    OpenBaoProvider, \
    AWSProvider, \
    AzureProvider, \
    GCPProvider, \
    StubProvider, \
    create_provider, \
    get_supported_providers, \
    get_provider_info
from swarm_secret_rotator.orchestrator import SwarmClient
from swarm_secret_rotator.rotation import SecretRotator
from swarm_secret_rotator.scheduler import RotationScheduler, RotationStats
from swarm_secret_rotator.config import DriverConfig, load_config, parse_duration
from swarm_secret_rotator.driver import SecretsDriver, SecretResponse
from ._version import __version__

__all__ = ["__version__",
           "SecretProviderError",
           "ConfigError",
           "AuthError",
           "NotFoundError",
           "NoActiveSecretVersion",
           "FieldNotFoundError",
           "BackendError",
           "ProviderNotImplemented",
           "SecretRotatorError",
           "OrchestratorError",
           "RotationError",
           "SecretObjectNotFound",
           "NewSecretCreateError",
           "PropagationError",
           "CleanupError",
           "SecretInfo",
           "SecretTracker",
           "fingerprint",
           "SecretRequest",
           "ResolvedSecret",
           "SecretsProvider",
           "VaultProvider",
           "OpenBaoProvider",
           "AWSProvider",
           "AzureProvider",
           "GCPProvider",
           "StubProvider",
           "create_provider",
           "get_supported_providers",
           "get_provider_info",
           "SwarmClient",
           "SecretRotator",
           "RotationScheduler",
           "RotationStats",
           "DriverConfig",
           "load_config",
           "parse_duration",
           "SecretsDriver",
           "SecretResponse"]
