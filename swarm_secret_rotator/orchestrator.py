# -*- coding: utf-8 -*-
"""Thin wrapper over the docker swarm secret and service api.

Secrets and services are returned as the dictionaries the engine api produces
e.g. for a service

{
    "ID": "string",
    "Version": {"Index": int},      # must be passed back on update
    "Spec": {
        "Name": "string",
        "Labels": {...},
        "TaskTemplate": {
            "ContainerSpec": {
                "Secrets": [{"File": {...}, "SecretID": "string", "SecretName": "string"}]
            }
        }
    }
}
"""

import logging
import threading

import docker
import requests
from dateutil import parser

from .exceptions import OrchestratorError

API_TIMEOUT = 60

# service spec keys and the APIClient.update_service argument carrying each
SERVICE_SPEC_ARGUMENTS = {
    "Name": "name",
    "Labels": "labels",
    "TaskTemplate": "task_template",
    "Mode": "mode",
    "UpdateConfig": "update_config",
    "RollbackConfig": "rollback_config",
    "Networks": "networks",
    "EndpointSpec": "endpoint_spec",
}


def secret_created_at(secret):
    """Creation time of a swarm secret, None if the engine did not report it."""
    created = secret.get("CreatedAt")
    if not created:
        return None
    return parser.isoparse(created)


class SwarmClient:
    """Swarm secret and service operations used by the rotation protocol.

    It uses thread-local storage (`threading.local`) so the request handlers and
    the rotation thread never share a docker api client.
    """

    def __init__(self, base_url=None, timeout=API_TIMEOUT, _client_factory=None):
        """
        Args:
            base_url (str, optional): Docker engine url, DOCKER_HOST and friends
                are honoured when not given.
            timeout (int): Seconds before an engine call is abandoned.
            _client_factory (callable, optional): Returns a `docker.APIClient`,
                used to substitute the engine in tests.
        """
        self._base_url = base_url
        self._timeout = timeout
        self._client_factory = _client_factory
        self._clients = []
        self._clients_lock = threading.Lock()
        self.ns = threading.local()

    @property
    def _api(self):
        if not hasattr(self.ns, "client"):
            if self._client_factory is not None:
                client = self._client_factory()
            elif self._base_url:
                client = docker.APIClient(base_url=self._base_url,
                                          version="auto",
                                          timeout=self._timeout)
            else:
                client = docker.from_env(version="auto", timeout=self._timeout).api
            self.ns.client = client
            with self._clients_lock:
                self._clients.append(client)
        return self.ns.client

    def _call(self, operation, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (docker.errors.DockerException, requests.exceptions.RequestException) as e:
            raise OrchestratorError(operation, e) from e

    def list_secrets(self):
        return self._call("secret list", lambda: self._api.secrets())

    def find_secret(self, name):
        """The swarm secret with exactly this name, None if there is none."""
        for secret in self._call("secret list",
                                 lambda: self._api.secrets(filters={"name": name})):
            if secret["Spec"]["Name"] == name:
                return secret
        return None

    def create_secret(self, name, data, labels=None):
        """
        Create a swarm secret holding data
        :param name: secret name
        :param data: bytes
        :param labels: dict copied onto the secret
        :return: id of the new secret
        """
        response = self._call(f"secret create {name}",
                              lambda: self._api.create_secret(name, data, labels=labels))
        return response["ID"]

    def remove_secret(self, secret_id):
        self._call(f"secret remove {secret_id}", lambda: self._api.remove_secret(secret_id))

    def list_services(self):
        return self._call("service list", lambda: self._api.services())

    def update_service(self, service_id, version, spec):
        """Replace a service spec, version is the index last read for the service.

        Returns:
            list: Warnings reported by the engine.
        """
        arguments = {argument: spec.get(key) for key, argument in SERVICE_SPEC_ARGUMENTS.items()}
        unsupported = set(spec) - set(SERVICE_SPEC_ARGUMENTS)
        if unsupported:
            logging.getLogger(__name__).warning(
                f"Service spec keys not sent on update of {spec.get('Name', service_id)}: "
                f"{sorted(unsupported)}")
        # the client moves networks into the task template it is given
        if arguments["task_template"] is not None:
            arguments["task_template"] = dict(arguments["task_template"])

        response = self._call(
            f"service update {spec.get('Name', service_id)}",
            lambda: self._api.update_service(service_id, version, **arguments))
        warnings = (response or {}).get("Warnings") or []
        if warnings:
            logging.getLogger(__name__).warning(
                f"Service update warnings for {spec.get('Name', service_id)}: {warnings}")
        return warnings

    def close(self):
        with self._clients_lock:
            clients, self._clients = self._clients, []
        for client in clients:
            try:
                client.close()
            except Exception as e:
                logging.getLogger(__name__).debug(f"Closing docker client: {e}")
        self.ns = threading.local()
