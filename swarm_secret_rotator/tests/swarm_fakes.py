# -*- coding: utf-8 -*-
"""
In memory stand ins for a credential store and the swarm api used by the tests

"""
import copy
import itertools

from swarm_secret_rotator import BackendError, NotFoundError, OrchestratorError, SecretsProvider


class FakeProvider(SecretsProvider):
    name = "fake"
    label_prefix = "fake"

    def __init__(self, records=None, rotation=True):
        super(FakeProvider, self).__init__()
        self.records = records if records is not None else {}
        self.failing = set()
        self.reads = []
        self.closed = 0
        self._rotation = rotation

    def initialize(self, config):
        self._config = config

    def build_secret_path(self, request):
        custom_path = self.label(request, "path")
        if custom_path:
            return f"secret/data/{custom_path}"
        return f"secret/data/{request.secret_name}"

    def read_record(self, path):
        self.reads.append(path)
        if path in self.failing:
            raise BackendError(path, self.name, "timeout")
        if path not in self.records:
            raise NotFoundError(path, self.name)
        return dict(self.records[path])

    def supports_rotation(self):
        return self._rotation

    def close(self):
        self.closed += 1


class FakeSwarm:
    """Swarm secrets and services, refuses to remove a secret a service still uses."""

    def __init__(self):
        self.secrets = {}
        self.services = {}
        self.created = []
        self.removed = []
        self.updated = []
        self.fail_update_for = set()
        self.fail_remove_for = set()
        self.fail_create = False
        self.closed = False
        self._ids = itertools.count(1)

    def add_secret(self, name, data=b"", labels=None):
        secret_id = f"sec{next(self._ids)}"
        self.secrets[secret_id] = {"ID": secret_id,
                                   "Version": {"Index": 1},
                                   "Spec": {"Name": name, "Labels": dict(labels or {})},
                                   "Data": data}
        return secret_id

    def add_service(self, name, secret_names, labels=None):
        service_id = f"svc{next(self._ids)}"
        refs = []
        for secret_name in secret_names:
            secret = self.find_secret(secret_name)
            refs.append({"File": {"Name": f"/run/secrets/{secret_name}",
                                  "UID": "0", "GID": "0", "Mode": 292},
                         "SecretID": secret["ID"],
                         "SecretName": secret_name})
        self.services[service_id] = {
            "ID": service_id,
            "Version": {"Index": 10},
            "Spec": {"Name": name,
                     "Labels": dict(labels or {}),
                     "Mode": {"Replicated": {"Replicas": 2}},
                     "TaskTemplate": {"ContainerSpec": {"Image": "nginx:latest",
                                                        "Secrets": refs}}}}
        return service_id

    def secret_names(self):
        return sorted(s["Spec"]["Name"] for s in self.secrets.values())

    def secret_data(self, name):
        return self.find_secret(name)["Data"]

    def service(self, name):
        for service in self.services.values():
            if service["Spec"]["Name"] == name:
                return service
        return None

    def service_refs(self, name):
        return self.service(name)["Spec"]["TaskTemplate"]["ContainerSpec"]["Secrets"]

    def list_secrets(self):
        return [copy.deepcopy({k: v for k, v in s.items() if k != "Data"})
                for s in self.secrets.values()]

    def find_secret(self, name):
        for secret in self.secrets.values():
            if secret["Spec"]["Name"] == name:
                return secret
        return None

    def create_secret(self, name, data, labels=None):
        if self.fail_create:
            raise OrchestratorError(f"secret create {name}", "rpc error: code = Unavailable")
        if self.find_secret(name):
            raise OrchestratorError(f"secret create {name}", "rpc error: code = AlreadyExists")
        secret_id = self.add_secret(name, data, labels)
        self.created.append(name)
        return secret_id

    def remove_secret(self, secret_id):
        secret = self.secrets.get(secret_id)
        if secret is None:
            raise OrchestratorError(f"secret remove {secret_id}", "no such secret")
        if secret["Spec"]["Name"] in self.fail_remove_for:
            raise OrchestratorError(f"secret remove {secret_id}", "rpc error: code = Unavailable")
        for service in self.services.values():
            for ref in service["Spec"]["TaskTemplate"]["ContainerSpec"]["Secrets"]:
                if ref["SecretID"] == secret_id:
                    raise OrchestratorError(f"secret remove {secret_id}",
                                            f"secret is in use by service {service['ID']}")
        del self.secrets[secret_id]
        self.removed.append(secret["Spec"]["Name"])

    def list_services(self):
        return copy.deepcopy(list(self.services.values()))

    def update_service(self, service_id, version, spec):
        service = self.services[service_id]
        if spec["Name"] in self.fail_update_for:
            raise OrchestratorError(f"service update {spec['Name']}", "rpc error: code = Unknown")
        if version != service["Version"]["Index"]:
            raise OrchestratorError(f"service update {spec['Name']}",
                                    "update out of sequence")
        service["Spec"] = copy.deepcopy(spec)
        service["Version"]["Index"] += 1
        self.updated.append(spec["Name"])
        return []

    def close(self):
        self.closed = True
