# -*- coding: utf-8 -*-
"""Docker secrets driver request handler.

Docker dials the plugin with one operation, get secret, carrying

{
    "SecretName":   "string",
    "ServiceName":  "string",
    "SecretLabels": {string: string}
}

and expects back

{
    "Value":      "base64 string",
    "Err":        "string",
    "DoNotReuse": bool
}

The socket transport belongs to the plugin host, this module only answers the
request and registers the secret for rotation.
"""

import base64
import logging
from dataclasses import dataclass

from .exceptions import SecretProviderError
from .orchestrator import SwarmClient
from .providers import SecretRequest, create_provider
from .rotation import SecretRotator
from .scheduler import RotationScheduler
from .tracker import SecretTracker

NON_REUSABLE_MARKERS = ("cert", "token", "dynamic")


@dataclass(frozen=True)
class SecretResponse:
    value: bytes = None
    err: str = ""
    do_not_reuse: bool = False

    def to_dict(self):
        body = {"Err": self.err, "DoNotReuse": self.do_not_reuse}
        if self.value is not None:
            body["Value"] = base64.b64encode(self.value).decode("ascii")
        return body


class SecretsDriver:
    """Answers get secret requests and keeps swarm in step with the backend.

    Attributes:
        provider (SecretsProvider): The credential store secrets are read from.
        tracker (SecretTracker): Secrets handed to swarm so far.
        scheduler (RotationScheduler): None when rotation is disabled.
    """

    def __init__(self, provider, tracker=None, scheduler=None, orchestrator=None):
        self._provider = provider
        self._tracker = tracker if tracker is not None else SecretTracker()
        self._scheduler = scheduler
        self._orchestrator = orchestrator

    @classmethod
    def from_config(cls, config, orchestrator=None):
        """Wire a driver from its settings.

        Args:
            config (DriverConfig): See `load_config`.
            orchestrator (SwarmClient, optional): Defaults to the local engine.

        Raises:
            ConfigError: For an unknown provider or invalid provider settings.
        """
        provider = create_provider(config.provider_type)
        provider.initialize(config.settings)

        tracker = SecretTracker()
        scheduler = None
        if not config.enable_rotation:
            logging.getLogger(__name__).info("Secret rotation monitoring is disabled")
        elif not provider.supports_rotation():
            logging.getLogger(__name__).info(
                f"Provider {provider.name} does not support rotation, monitoring is disabled")
        else:
            if orchestrator is None:
                orchestrator = SwarmClient()
            rotator = SecretRotator(provider, tracker, orchestrator)
            scheduler = RotationScheduler([provider], tracker, rotator,
                                          interval=config.rotation_interval)

        return cls(provider, tracker=tracker, scheduler=scheduler, orchestrator=orchestrator)

    @property
    def provider(self):
        return self._provider

    @property
    def tracker(self):
        return self._tracker

    @property
    def scheduler(self):
        return self._scheduler

    def start(self):
        if self._scheduler is not None:
            logging.getLogger(__name__).info(
                f"Starting secret rotation monitoring with interval: {self._scheduler.interval}s")
            self._scheduler.start()

    def stop(self):
        if self._scheduler is not None:
            self._scheduler.stop()
        self._provider.close()
        if self._orchestrator is not None:
            self._orchestrator.close()

    def should_not_reuse(self, request):
        reuse = self._provider.label(request, "reuse")
        if reuse is not None:
            return reuse.strip().lower() == "false"
        return any(marker in request.secret_name for marker in NON_REUSABLE_MARKERS)

    def get(self, request):
        """
        Read the secret swarm asked for
        :param request: SecretRequest
        :return: SecretResponse with either a value or an error, never both
        """
        logging.getLogger(__name__).info(f"Received secret request for: {request.secret_name}")

        if not request.secret_name:
            return SecretResponse(err="secret name is required")

        try:
            resolved = self._provider.resolve_secret(request)
        except SecretProviderError as e:
            logging.getLogger(__name__).error(f"Error reading secret {request.secret_name}: {e}")
            return SecretResponse(err=f"failed to read secret from {self._provider.name}: {e}")
        except Exception as e:
            logging.getLogger(__name__).exception(
                f"While reading secret {request.secret_name}")
            return SecretResponse(err=f"failed to read secret from {self._provider.name}: {e}")

        self._tracker.track(request.secret_name,
                            resolved.path,
                            resolved.field,
                            request.service_name,
                            resolved.value,
                            provider=self._provider.name)

        logging.getLogger(__name__).info(f"Successfully returning secret value for {request.secret_name}")
        return SecretResponse(value=resolved.value, do_not_reuse=self.should_not_reuse(request))

    def handle(self, body):
        """Answer a json decoded get secret body with a json ready dict."""
        return self.get(SecretRequest.from_dict(body or {})).to_dict()
