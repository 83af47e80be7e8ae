# -*- coding: utf-8 -*-
"""
Secret providers hide the differences between the credential stores a swarm
secret can be read from.

Every provider answers the same questions

get secret        - read a record at a backend path and extract one value from it
check changed     - read the tracked path/field again and compare its hash with the
                    last value handed to swarm
supports rotation - whether the rotation thread may poll the provider at all

A record is always reduced to a flat map of field name to value. The value handed
back to swarm is picked from that map in this order

1. the field named by the ``<prefix>_field`` label of the secret
2. the first of ``value``, ``password``, ``secret``, ``data`` present in the record
3. the first string valued field of the record

Labels understood on a swarm secret (prefix is the provider label prefix e.g. vault)

{
    "<prefix>_path":        "string"  # backend path override (vault, openbao)
    "<prefix>_secret_name": "string"  # backend secret name override (aws, azure, gcp)
    "<prefix>_field":       "string"  # field of the record to hand to swarm
    "<prefix>_reuse":       "false"   # ask swarm never to reuse the value
}
"""

import json
import logging
import re
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from urllib.parse import quote

import boto3
import botocore.config
import botocore.exceptions
import google.auth
import google.auth.exceptions
import google_crc32c
import hvac
import requests
from google.api_core import exceptions as google_exceptions
from google.cloud import secretmanager, secretmanager_v1
from google.oauth2 import service_account

from .exceptions import AuthError, \
    BackendError, \
    ConfigError, \
    FieldNotFoundError, \
    NoActiveSecretVersion, \
    NotFoundError, \
    ProviderNotImplemented
from .tracker import fingerprint

DEFAULT_FIELDS = ("value", "password", "secret", "data")

REQUEST_TIMEOUT = 30.0


@dataclass(frozen=True)
class SecretRequest:
    secret_name: str
    service_name: str = ""
    secret_labels: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, body):
        """Build a request from the secrets driver json body sent by docker."""
        return cls(secret_name=body.get("SecretName") or "",
                   service_name=body.get("ServiceName") or "",
                   secret_labels=dict(body.get("SecretLabels") or {}))


@dataclass(frozen=True)
class ResolvedSecret:
    path: str
    field: str
    value: bytes


def _as_bytes(value):
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    return json.dumps(value).encode("utf-8")


def extract_secret_value(data, field_name=None, path=None):
    """
    Pick the value to hand to swarm out of a backend record
    :param data: dict of field name to value
    :param field_name: explicit field to use, None to apply the defaults
    :param path: backend path used for error messages
    :return: tuple of (field name used, value as bytes)
    """
    if field_name:
        if field_name in data:
            return field_name, _as_bytes(data[field_name])
        raise FieldNotFoundError(path, field_name)

    for default_field in DEFAULT_FIELDS:
        if default_field in data:
            return default_field, _as_bytes(data[default_field])

    for key, value in data.items():
        if isinstance(value, str):
            return key, value.encode("utf-8")

    raise FieldNotFoundError(path, "|".join(DEFAULT_FIELDS) + "|<first string>")


def parse_secret_record(raw):
    """Stores that keep a single string per secret may hold json objects in it."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return {"value": raw}
    try:
        data = json.loads(raw)
    except ValueError:
        return {"value": raw}
    if isinstance(data, dict):
        return data
    return {"value": raw}


def _sanitize_name(name, invalid=r"[^0-9A-Za-z-]", numeric_prefix=True):
    result = re.sub(invalid, "-", name)
    result = re.sub(r"-{2,}", "-", result).strip("-")
    if numeric_prefix and (not result or result[0].isdigit()):
        result = "secret-" + result
    return result


class SecretsProvider(ABC):
    """Abstract Base Class for a credential store.

    Concrete providers only have to know how to validate their configuration,
    build a backend path for a request and read the record at a path. Field
    extraction and change detection are shared so every backend behaves the
    same towards the driver and the rotation thread.
    """

    name = None
    label_prefix = None
    path_label = "path"

    def __init__(self):
        self._config = None

    @abstractmethod
    def initialize(self, config):
        """Validate and apply the provider settings.

        Args:
            config (dict): Settings keyed by environment variable name.

        Raises:
            ConfigError: When required settings are missing or invalid.
        """

    @abstractmethod
    def build_secret_path(self, request):
        """Backend path for a request, label override first."""

    @abstractmethod
    def read_record(self, path):
        """Read the record at a backend path.

        Returns:
            dict: Field name to value.

        Raises:
            NotFoundError, AuthError, BackendError
        """

    def label(self, request, suffix):
        return request.secret_labels.get(f"{self.label_prefix}_{suffix}")

    def resolve_secret(self, request):
        path = self.build_secret_path(request)
        logging.getLogger(__name__).info(f"Reading secret from {self.name}: {path}")
        data = self.read_record(path)
        field_name, value = extract_secret_value(data, self.label(request, "field"), path)
        return ResolvedSecret(path=path, field=field_name, value=value)

    def get_secret(self, request):
        return self.resolve_secret(request).value

    def fetch_field(self, path, field_name):
        data = self.read_record(path)
        _, value = extract_secret_value(data, field_name, path)
        return value

    def supports_rotation(self):
        return True

    def check_secret_changed(self, secret_info):
        """
        Re-read a tracked secret and compare its hash, secret_info is not modified
        :param secret_info: SecretInfo
        :return: True if the backend value no longer matches the value given to swarm
        """
        value = self.fetch_field(secret_info.secret_path, secret_info.secret_field)
        return fingerprint(value) != secret_info.last_hash

    def close(self):
        pass


class VaultProvider(SecretsProvider):
    """HashiCorp Vault using token or AppRole authentication.

    When the mount is ``secret`` it is assumed to be a KV version 2 engine and
    paths get the ``data/`` infix. Settings are read with the ``VAULT_`` prefix.
    """

    name = "vault"
    label_prefix = "vault"
    env_prefix = "VAULT"

    def __init__(self):
        super(VaultProvider, self).__init__()
        self._client = None
        self._mount_path = None
        self._auth_method = None
        self._role_id = None
        self._secret_id = None
        self._authenticated = False
        self._auth_lock = threading.Lock()

    def _setting(self, config, key, default=None):
        return config.get(f"{self.env_prefix}_{key}") or default

    def initialize(self, config):
        address = self._setting(config, "ADDR")
        if not address:
            raise ConfigError(self.name, f"{self.env_prefix}_ADDR is required")

        self._config = config
        self._mount_path = self._setting(config, "MOUNT_PATH", "secret").strip("/")
        self._auth_method = self._setting(config, "AUTH_METHOD", "token").lower()

        token = None
        if self._auth_method == "token":
            token = self._setting(config, "TOKEN")
            if not token:
                raise ConfigError(self.name,
                                  f"{self.env_prefix}_TOKEN is required for token authentication")
        elif self._auth_method == "approle":
            self._role_id = self._setting(config, "ROLE_ID")
            self._secret_id = self._setting(config, "SECRET_ID")
            if not self._role_id or not self._secret_id:
                raise ConfigError(self.name,
                                  f"{self.env_prefix}_ROLE_ID and {self.env_prefix}_SECRET_ID "
                                  f"are required for approle authentication")
        else:
            raise ConfigError(self.name,
                              f"unsupported authentication method: {self._auth_method}")

        cert = None
        if self._setting(config, "CLIENT_CERT"):
            cert = (self._setting(config, "CLIENT_CERT"), self._setting(config, "CLIENT_KEY"))

        self._client = hvac.Client(url=address,
                                   token=token,
                                   namespace=self._setting(config, "NAMESPACE"),
                                   verify=self._setting(config, "CACERT", True),
                                   cert=cert,
                                   timeout=REQUEST_TIMEOUT)

        if self._auth_method == "token":
            self._authenticated = True
        else:
            # a vault that is sealed or unreachable at startup is retried on first use
            try:
                self._login()
            except AuthError as e:
                logging.getLogger(__name__).warning(
                    f"{self.name} approle login failed, retrying on next request: {e}")

        logging.getLogger(__name__).info(
            f"Initialized {self.name} provider at {address} using {self._auth_method} method")

    def _login(self):
        try:
            self._client.auth.approle.login(role_id=self._role_id, secret_id=self._secret_id)
        except (hvac.exceptions.VaultError, requests.exceptions.RequestException) as e:
            raise AuthError(self.name, e) from e
        self._authenticated = True

    def _ensure_authenticated(self):
        with self._auth_lock:
            if not self._authenticated:
                self._login()

    def build_secret_path(self, request):
        prefix = self._mount_path
        if self._mount_path == "secret":
            prefix = f"{self._mount_path}/data"

        custom_path = self.label(request, self.path_label)
        if custom_path:
            return f"{prefix}/{custom_path.strip('/')}"
        if request.service_name:
            return f"{prefix}/{request.service_name}/{request.secret_name}"
        return f"{prefix}/{request.secret_name}"

    def read_record(self, path):
        self._ensure_authenticated()
        try:
            response = self._client.read(path)
        except hvac.exceptions.InvalidPath as e:
            raise NotFoundError(path, self.name) from e
        except (hvac.exceptions.Forbidden, hvac.exceptions.Unauthorized) as e:
            if self._auth_method == "approle":
                with self._auth_lock:
                    self._authenticated = False
            raise AuthError(self.name, e) from e
        except (hvac.exceptions.VaultError, requests.exceptions.RequestException) as e:
            raise BackendError(path, self.name, e) from e

        if not response:
            raise NotFoundError(path, self.name)

        data = response.get("data") or {}
        # kv v2 wraps the record with its version metadata
        if "metadata" in data and "data" in data:
            data = data["data"]
            if data is None:
                raise NotFoundError(path, self.name)
        return data

    def close(self):
        if self._client is None:
            return
        try:
            self._client.adapter.close()
        except Exception as e:
            logging.getLogger(__name__).debug(f"Closing {self.name} client: {e}")
        self._client = None


class OpenBaoProvider(VaultProvider):
    """OpenBao speaks the vault api, only the settings prefix and labels differ."""

    name = "openbao"
    label_prefix = "openbao"
    env_prefix = "OPENBAO"


class AWSProvider(SecretsProvider):
    """AWS Secrets Manager.

    Credentials come from the usual boto3 chain unless a profile or static keys
    are configured. ``AWS_SECRET_PREFIX`` is prepended to generated names.
    """

    name = "aws"
    label_prefix = "aws"
    path_label = "secret_name"

    AUTH_ERROR_CODES = ("AccessDeniedException",
                        "UnrecognizedClientException",
                        "InvalidSignatureException",
                        "ExpiredTokenException")

    def __init__(self):
        super(AWSProvider, self).__init__()
        self._client = None
        self._prefix = ""

    def initialize(self, config):
        region = config.get("AWS_REGION") or config.get("AWS_DEFAULT_REGION")
        if not region:
            raise ConfigError(self.name, "AWS_REGION is required")

        access_key = config.get("AWS_ACCESS_KEY_ID")
        secret_key = config.get("AWS_SECRET_ACCESS_KEY")
        if bool(access_key) != bool(secret_key):
            raise ConfigError(self.name,
                              "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set together")

        self._config = config
        self._prefix = config.get("AWS_SECRET_PREFIX", "")

        session_kwargs = {"region_name": region}
        if config.get("AWS_PROFILE"):
            session_kwargs["profile_name"] = config["AWS_PROFILE"]
        if access_key:
            session_kwargs["aws_access_key_id"] = access_key
            session_kwargs["aws_secret_access_key"] = secret_key
            session_kwargs["aws_session_token"] = config.get("AWS_SESSION_TOKEN")

        try:
            session = boto3.session.Session(**session_kwargs)
            self._client = session.client(
                "secretsmanager",
                endpoint_url=config.get("AWS_ENDPOINT_URL"),
                config=botocore.config.Config(connect_timeout=REQUEST_TIMEOUT,
                                              read_timeout=REQUEST_TIMEOUT,
                                              retries={"mode": "standard", "max_attempts": 1}))
        except botocore.exceptions.BotoCoreError as e:
            raise ConfigError(self.name, str(e)) from e

        logging.getLogger(__name__).info(f"Initialized {self.name} provider in region {region}")

    def build_secret_path(self, request):
        custom_name = self.label(request, self.path_label)
        if custom_name:
            return custom_name
        if request.service_name:
            return f"{self._prefix}{request.service_name}/{request.secret_name}"
        return f"{self._prefix}{request.secret_name}"

    def read_record(self, path):
        try:
            response = self._client.get_secret_value(SecretId=path)
        except botocore.exceptions.ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code == "ResourceNotFoundException":
                raise NotFoundError(path, self.name) from e
            if code in self.AUTH_ERROR_CODES:
                raise AuthError(self.name, e) from e
            raise BackendError(path, self.name, e) from e
        except botocore.exceptions.NoCredentialsError as e:
            raise AuthError(self.name, e) from e
        except botocore.exceptions.BotoCoreError as e:
            raise BackendError(path, self.name, e) from e

        if response.get("SecretString") is not None:
            return parse_secret_record(response["SecretString"])
        if response.get("SecretBinary") is not None:
            return {"value": response["SecretBinary"]}
        raise NotFoundError(path, self.name)

    def close(self):
        if self._client is None:
            return
        try:
            self._client.close()
        except Exception as e:
            logging.getLogger(__name__).debug(f"Closing {self.name} client: {e}")
        self._client = None


class AzureProvider(SecretsProvider):
    """Azure Key Vault over its REST api.

    A bearer token can be given directly with ``AZURE_ACCESS_TOKEN``, otherwise
    one is fetched with the OAuth2 client credentials grant and fetched again
    when it expires or the vault rejects it.
    """

    name = "azure"
    label_prefix = "azure"
    path_label = "secret_name"

    API_VERSION = "7.3"
    TOKEN_URL = "https://login.microsoftonline.com/{}/oauth2/v2.0/token"
    SCOPE = "https://vault.azure.net/.default"

    def __init__(self):
        super(AzureProvider, self).__init__()
        self._vault_url = None
        self._tenant_id = None
        self._client_id = None
        self._client_secret = None
        self._access_token = None
        self._token_expiry = None
        self._token_lock = threading.Lock()
        self._session = None

    def initialize(self, config):
        vault_url = config.get("AZURE_VAULT_URL")
        if not vault_url:
            raise ConfigError(self.name, "AZURE_VAULT_URL is required")

        if not vault_url.startswith("https://"):
            vault_url = "https://" + vault_url
        if not vault_url.endswith("/"):
            vault_url += "/"

        self._config = config
        self._vault_url = vault_url
        self._tenant_id = config.get("AZURE_TENANT_ID")
        self._client_id = config.get("AZURE_CLIENT_ID")
        self._client_secret = config.get("AZURE_CLIENT_SECRET")
        self._access_token = config.get("AZURE_ACCESS_TOKEN")

        if not self._access_token and not self._has_client_credentials:
            raise ConfigError(self.name,
                              "AZURE_ACCESS_TOKEN or AZURE_TENANT_ID, AZURE_CLIENT_ID and "
                              "AZURE_CLIENT_SECRET are required")

        self._session = requests.Session()

        if not self._access_token:
            try:
                self._authenticate()
            except (AuthError, BackendError) as e:
                logging.getLogger(__name__).warning(
                    f"Azure authentication failed, retrying on next request: {e}")

        logging.getLogger(__name__).info(
            f"Initialized {self.name} provider for vault: {self._vault_url}")

    @property
    def vault_url(self):
        return self._vault_url

    @property
    def _has_client_credentials(self):
        return bool(self._tenant_id and self._client_id and self._client_secret)

    def _authenticate(self):
        token_url = self.TOKEN_URL.format(self._tenant_id)
        try:
            response = self._session.post(token_url,
                                          data={"grant_type": "client_credentials",
                                                "client_id": self._client_id,
                                                "client_secret": self._client_secret,
                                                "scope": self.SCOPE},
                                          timeout=REQUEST_TIMEOUT)
        except requests.exceptions.RequestException as e:
            raise BackendError(token_url, self.name, e) from e

        if response.status_code != 200:
            raise AuthError(self.name,
                            f"Azure authentication failed with status {response.status_code}")

        try:
            token_response = response.json()
            self._access_token = token_response["access_token"]
        except (ValueError, KeyError) as e:
            raise AuthError(self.name, f"failed to decode auth response: {e}") from e

        expires_in = token_response.get("expires_in")
        self._token_expiry = None
        if expires_in:
            # refresh a minute early
            self._token_expiry = time.monotonic() + max(int(expires_in) - 60, 0)

    def _bearer_token(self):
        with self._token_lock:
            expired = self._token_expiry is not None and time.monotonic() >= self._token_expiry
            if self._access_token and not expired:
                return self._access_token
            if not self._has_client_credentials:
                raise AuthError(self.name, "no access token available for Azure authentication")
            self._authenticate()
            return self._access_token

    def _invalidate_token(self):
        with self._token_lock:
            if self._has_client_credentials:
                self._access_token = None
                self._token_expiry = None

    def build_secret_path(self, request):
        custom_name = self.label(request, self.path_label)
        if custom_name:
            return custom_name

        secret_name = request.secret_name
        if request.service_name:
            secret_name = f"{request.service_name}-{request.secret_name}"
        # key vault names must match ^[0-9a-zA-Z-]+$
        return _sanitize_name(secret_name)

    def read_record(self, path):
        token = self._bearer_token()
        api_url = f"{self._vault_url}secrets/{quote(path, safe='/')}"
        try:
            response = self._session.get(api_url,
                                         params={"api-version": self.API_VERSION},
                                         headers={"Authorization": f"Bearer {token}"},
                                         timeout=REQUEST_TIMEOUT)
        except requests.exceptions.RequestException as e:
            raise BackendError(path, self.name, e) from e

        if response.status_code == 401:
            self._invalidate_token()
            raise AuthError(self.name, f"Azure Key Vault returned status {response.status_code}")
        if response.status_code == 403:
            raise AuthError(self.name, f"Azure Key Vault returned status {response.status_code}")
        if response.status_code == 404:
            raise NotFoundError(path, self.name)
        if response.status_code != 200:
            raise BackendError(path, self.name,
                               f"Azure Key Vault returned status {response.status_code}")

        try:
            value = response.json().get("value")
        except ValueError as e:
            raise BackendError(path, self.name, f"failed to decode Azure response: {e}") from e
        if value is None:
            raise NotFoundError(path, self.name)
        return parse_secret_record(value)

    def close(self):
        if self._session is not None:
            self._session.close()
            self._session = None


class GCPProvider(SecretsProvider):
    """GCP Secret Manager.

    Rather than the ``latest`` alias the most recent ENABLED version is read, so a
    bad release can be rolled back by disabling it. A secret name ending in
    ``/versions/N`` reads the most recent enabled version no newer than N.
    """

    name = "gcp"
    label_prefix = "gcp"
    path_label = "secret_name"

    def __init__(self, _credentials_callback=None):
        super(GCPProvider, self).__init__()
        self._project_id = None
        self._credentials_info = None
        self._credentials_callback = _credentials_callback
        self.ns = threading.local()

    def initialize(self, config):
        project_id = config.get("GCP_PROJECT_ID") or config.get("GOOGLE_CLOUD_PROJECT")
        if not project_id:
            raise ConfigError(self.name, "GCP_PROJECT_ID is required")

        credentials_json = config.get("GCP_CREDENTIALS_JSON")
        if credentials_json:
            try:
                self._credentials_info = json.loads(credentials_json)
            except ValueError as e:
                raise ConfigError(self.name, f"GCP_CREDENTIALS_JSON is not valid json: {e}") from e

        self._config = config
        self._project_id = project_id
        logging.getLogger(__name__).info(
            f"Initialized {self.name} provider for project: {self._project_id}")

    @property
    def project_id(self):
        return self._project_id

    @property
    def _credentials(self):
        if not hasattr(self.ns, "_credentials"):
            if self._credentials_callback is not None:
                _credentials, _project_id = self._credentials_callback()
            elif self._credentials_info is not None:
                _credentials = service_account.Credentials.from_service_account_info(
                    self._credentials_info)
            else:
                _credentials, _project_id = google.auth.default()
            self.ns._credentials = _credentials
        return self.ns._credentials

    def _client(self):
        if not hasattr(self.ns, "client"):
            self.ns.client = secretmanager.SecretManagerServiceClient(
                credentials=self._credentials)
        return self.ns.client

    def build_secret_path(self, request):
        custom_name = self.label(request, self.path_label)
        if custom_name:
            if custom_name.startswith("projects/"):
                return custom_name
            return f"projects/{self._project_id}/secrets/{custom_name}"

        secret_name = request.secret_name
        if request.service_name:
            secret_name = f"{request.service_name}-{request.secret_name}"
        secret_id = _sanitize_name(secret_name, invalid=r"[^0-9A-Za-z_-]", numeric_prefix=False)
        return f"projects/{self._project_id}/secrets/{secret_id}"

    def _latest_enabled_version(self, secret_name, max_version):
        request = secretmanager_v1.ListSecretVersionsRequest(
            parent=secret_name,
            filter="state=ENABLED"
        )
        page_result = self._client().list_secret_versions(request=request,
                                                          timeout=REQUEST_TIMEOUT)
        latest = None
        for response in sorted(page_result, key=lambda d: d.create_time):
            version_num = int(response.name.rsplit("/", 1)[-1])
            if max_version is not None and version_num > max_version:
                continue
            latest = response
        return latest

    def read_record(self, path):
        secret_name = path
        max_version = None
        secret_version_match = re.search(
            r'(projects/[^/]+/secrets/[^/]+)/versions/([0-9]+|latest)', path)
        if secret_version_match:
            secret_name = secret_version_match.group(1)
            if secret_version_match.group(2) != "latest":
                max_version = int(secret_version_match.group(2))

        try:
            latest = self._latest_enabled_version(secret_name, max_version)
            if not latest:
                raise NoActiveSecretVersion(path, self.name)

            request = secretmanager_v1.AccessSecretVersionRequest(name=latest.name)
            payload = self._client().access_secret_version(request=request,
                                                           timeout=REQUEST_TIMEOUT).payload
        except google_exceptions.NotFound as e:
            raise NotFoundError(path, self.name) from e
        except (google_exceptions.PermissionDenied, google_exceptions.Unauthenticated) as e:
            raise AuthError(self.name, e) from e
        except google.auth.exceptions.GoogleAuthError as e:
            raise AuthError(self.name, e) from e
        except (google_exceptions.GoogleAPICallError, google_exceptions.RetryError) as e:
            raise BackendError(path, self.name, e) from e

        if payload.data_crc32c:
            crc32c = google_crc32c.Checksum()
            crc32c.update(payload.data)
            if int(crc32c.hexdigest(), 16) != payload.data_crc32c:
                raise BackendError(path, self.name, "data corruption detected in payload")

        return parse_secret_record(payload.data)

    def close(self):
        client = getattr(self.ns, "client", None)
        if client is None:
            return
        try:
            client.transport.close()
        except Exception as e:
            logging.getLogger(__name__).debug(f"Closing {self.name} client: {e}")
        del self.ns.client


class StubProvider(SecretsProvider):
    """Placeholder for stores that are not wired up, every read fails."""

    name = "stub"
    label_prefix = "stub"

    def initialize(self, config):
        self._config = config
        logging.getLogger(__name__).warning(
            f"Provider {self.name} is a placeholder, every secret request will fail")

    def build_secret_path(self, request):
        return request.secret_name

    def read_record(self, path):
        raise ProviderNotImplemented(self.name)

    def supports_rotation(self):
        return False

    def check_secret_changed(self, secret_info):
        raise ProviderNotImplemented(self.name)


_PROVIDERS = {
    "vault": VaultProvider,
    "hashicorp-vault": VaultProvider,
    "aws": AWSProvider,
    "aws-secrets-manager": AWSProvider,
    "gcp": GCPProvider,
    "gcp-secret-manager": GCPProvider,
    "google": GCPProvider,
    "azure": AzureProvider,
    "azure-key-vault": AzureProvider,
    "openbao": OpenBaoProvider,
    "stub": StubProvider,
}

SUPPORTED_PROVIDERS = ("vault", "aws", "gcp", "azure", "openbao")

_PROVIDER_INFO = {
    "vault": {
        "name": "HashiCorp Vault",
        "description": "HashiCorp Vault secrets engine",
        "auth_methods": "token, approle",
        "env_vars": "VAULT_ADDR, VAULT_TOKEN, VAULT_MOUNT_PATH, VAULT_AUTH_METHOD, "
                    "VAULT_ROLE_ID, VAULT_SECRET_ID, VAULT_NAMESPACE, VAULT_CACERT, "
                    "VAULT_CLIENT_CERT, VAULT_CLIENT_KEY",
    },
    "aws": {
        "name": "AWS Secrets Manager",
        "description": "Amazon Web Services Secrets Manager",
        "auth_methods": "IAM roles, access keys, profiles",
        "env_vars": "AWS_REGION, AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_PROFILE, "
                    "AWS_SECRET_PREFIX",
    },
    "gcp": {
        "name": "GCP Secret Manager",
        "description": "Google Cloud Platform Secret Manager",
        "auth_methods": "service account, ADC",
        "env_vars": "GCP_PROJECT_ID, GOOGLE_APPLICATION_CREDENTIALS, GCP_CREDENTIALS_JSON",
    },
    "azure": {
        "name": "Azure Key Vault",
        "description": "Microsoft Azure Key Vault",
        "auth_methods": "service principal, access token",
        "env_vars": "AZURE_VAULT_URL, AZURE_TENANT_ID, AZURE_CLIENT_ID, AZURE_CLIENT_SECRET, "
                    "AZURE_ACCESS_TOKEN",
    },
    "openbao": {
        "name": "OpenBao",
        "description": "OpenBao secrets engine (Vault-compatible)",
        "auth_methods": "token, approle",
        "env_vars": "OPENBAO_ADDR, OPENBAO_TOKEN, OPENBAO_MOUNT_PATH, OPENBAO_AUTH_METHOD, "
                    "OPENBAO_ROLE_ID, OPENBAO_SECRET_ID",
    },
    "stub": {
        "name": "Stub",
        "description": "Placeholder provider that fails every request",
        "auth_methods": "none",
        "env_vars": "",
    },
}


def _provider_class(provider_type):
    provider_class = _PROVIDERS.get((provider_type or "").strip().lower())
    if provider_class is None:
        raise ConfigError(provider_type, f"unsupported provider type: {provider_type}")
    return provider_class


def create_provider(provider_type):
    """
    New, uninitialized provider for a provider type or alias
    :param provider_type: e.g. vault, aws-secrets-manager, google
    :return: SecretsProvider
    """
    return _provider_class(provider_type)()


def get_supported_providers():
    return list(SUPPORTED_PROVIDERS)


def get_provider_info(provider_type):
    return dict(_PROVIDER_INFO[_provider_class(provider_type).name])
