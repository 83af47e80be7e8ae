# -*- coding: utf-8 -*-
import datetime
import threading
import unittest
from unittest import mock

import docker
import pytz
import requests

from swarm_secret_rotator import OrchestratorError, SwarmClient
from swarm_secret_rotator.orchestrator import SERVICE_SPEC_ARGUMENTS, secret_created_at


class TestSwarmClient(unittest.TestCase):

    def setUp(self):
        self.api = mock.MagicMock()
        self.factory = mock.Mock(return_value=self.api)
        self.client = SwarmClient(_client_factory=self.factory)

    def test_find_secret_exact_match(self):
        self.api.secrets.return_value = [{"ID": "a", "Spec": {"Name": "db-pass-1700000000"}},
                                         {"ID": "b", "Spec": {"Name": "db-pass"}}]
        assert self.client.find_secret("db-pass")["ID"] == "b"
        self.api.secrets.assert_called_with(filters={"name": "db-pass"})

        self.api.secrets.return_value = [{"ID": "a", "Spec": {"Name": "db-pass-1700000000"}}]
        assert self.client.find_secret("db-pass") is None

    def test_create_secret_returns_id(self):
        self.api.create_secret.return_value = {"ID": "xyz"}
        assert self.client.create_secret("db-pass-1", b"v", labels={"a": "b"}) == "xyz"
        self.api.create_secret.assert_called_once_with("db-pass-1", b"v", labels={"a": "b"})

    def test_update_service_passes_spec(self):
        self.api.update_service.return_value = {"Warnings": ["image could not be resolved"]}
        spec = {"Name": "web",
                "Labels": {"a": "b"},
                "Mode": {"Replicated": {"Replicas": 1}},
                "TaskTemplate": {"ContainerSpec": {"Image": "nginx"}}}

        warnings = self.client.update_service("svc1", 12, spec)

        assert warnings == ["image could not be resolved"]
        args, kwargs = self.api.update_service.call_args
        assert args == ("svc1", 12)
        assert kwargs["task_template"] == spec["TaskTemplate"]
        assert kwargs["name"] == "web"
        assert kwargs["labels"] == {"a": "b"}
        assert kwargs["mode"] == {"Replicated": {"Replicas": 1}}
        assert kwargs["endpoint_spec"] is None

    def test_update_service_keeps_every_spec_key(self):
        self.api.update_service.return_value = {}
        spec = {"Name": "web",
                "Labels": {"vault.secret.rotated": "1700000000"},
                "TaskTemplate": {"ContainerSpec": {"Image": "nginx", "Secrets": []}},
                "Mode": {"Replicated": {"Replicas": 2}},
                "UpdateConfig": {"Parallelism": 1},
                "RollbackConfig": {"Parallelism": 1},
                "Networks": [{"Target": "net1"}],
                "EndpointSpec": {"Mode": "vip"}}

        self.client.update_service("svc1", 12, spec)

        kwargs = self.api.update_service.call_args[1]
        for key, argument in SERVICE_SPEC_ARGUMENTS.items():
            assert kwargs[argument] == spec[key], f"{key} was not sent"
        assert kwargs["networks"] == [{"Target": "net1"}]
        assert kwargs["task_template"] is not spec["TaskTemplate"], \
            "The caller's task template must not be handed to the client"

    def test_update_service_without_warnings(self):
        self.api.update_service.return_value = None
        assert self.client.update_service("svc1", 1, {"Name": "web"}) == []

    def test_engine_errors_wrapped(self):
        self.api.remove_secret.side_effect = docker.errors.APIError("secret is in use")
        with self.assertRaises(OrchestratorError) as ctx:
            self.client.remove_secret("sec1")
        assert ctx.exception.operation == "secret remove sec1"

        self.api.services.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(OrchestratorError):
            self.client.list_services()

    def test_client_per_thread(self):
        self.factory.side_effect = lambda: mock.MagicMock()
        self.client.list_secrets()
        self.client.list_secrets()
        t = threading.Thread(target=self.client.list_secrets)
        t.start()
        t.join()
        assert self.factory.call_count == 2

    def test_close_closes_every_client(self):
        clients = [mock.MagicMock(), mock.MagicMock()]
        self.factory.side_effect = list(clients)
        self.client.list_secrets()
        t = threading.Thread(target=self.client.list_secrets)
        t.start()
        t.join()

        self.client.close()

        for c in clients:
            c.close.assert_called_once_with()


class TestSecretCreatedAt(unittest.TestCase):

    def test_engine_timestamp(self):
        created = secret_created_at({"CreatedAt": "2023-11-14T22:13:20.123456789Z"})
        assert created.tzinfo is not None
        assert created.astimezone(pytz.utc).replace(microsecond=0) == \
            datetime.datetime(2023, 11, 14, 22, 13, 20, tzinfo=pytz.utc)

    def test_missing_timestamp(self):
        assert secret_created_at({}) is None
