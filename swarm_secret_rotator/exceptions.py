# -*- coding: utf-8 -*-

class SecretProviderError(Exception):
    """Base Error class."""


class ConfigError(SecretProviderError):
    CUSTOM_ERROR_MESSAGE = "Provider {} configuration invalid: {}"

    def __init__(self, provider, reason):
        super(ConfigError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(provider, reason))
        self._provider = provider
        self._reason = reason

    @property
    def provider(self):
        return self._provider

    @property
    def reason(self):
        return self._reason


class AuthError(SecretProviderError):
    CUSTOM_ERROR_MESSAGE = "Provider {} authentication failed: {}"

    def __init__(self, provider, error):
        super(AuthError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(provider, str(error)))
        self._provider = provider
        self._error = error

    @property
    def provider(self):
        return self._provider

    @property
    def error(self):
        return self._error


class NotFoundError(SecretProviderError):
    CUSTOM_ERROR_MESSAGE = "Secret not found at path: {} (verify the secret exists in {})"

    def __init__(self, path, provider):
        super(NotFoundError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(path, provider))
        self._path = path
        self._provider = provider

    @property
    def path(self):
        return self._path

    @property
    def provider(self):
        return self._provider


class NoActiveSecretVersion(NotFoundError):
    CUSTOM_ERROR_MESSAGE = "Secret {} has no active enabled versions in {}"


class FieldNotFoundError(NotFoundError):
    CUSTOM_ERROR_MESSAGE = "Field {} not found in secret at path {}"

    def __init__(self, path, field):
        super(NotFoundError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(field, path))
        self._path = path
        self._provider = None
        self._field = field

    @property
    def field(self):
        return self._field


class BackendError(SecretProviderError):
    CUSTOM_ERROR_MESSAGE = "Failed to read secret {} from {}: {}"

    def __init__(self, path, provider, error):
        super(BackendError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(path,
                                                                            provider,
                                                                            str(error)))
        self._path = path
        self._provider = provider
        self._error = error

    @property
    def path(self):
        return self._path

    @property
    def provider(self):
        return self._provider

    @property
    def error(self):
        return self._error


class ProviderNotImplemented(SecretProviderError):
    CUSTOM_ERROR_MESSAGE = "Provider {} is not implemented"

    def __init__(self, provider):
        super(ProviderNotImplemented, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(provider))


class SecretRotatorError(Exception):
    """Base Error class."""


class OrchestratorError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Swarm {} failed: {}"

    def __init__(self, operation, error):
        super(OrchestratorError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(operation,
                                                                                 str(error)))
        self._operation = operation
        self._error = error

    @property
    def operation(self):
        return self._operation

    @property
    def error(self):
        return self._error


class RotationError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Secret {} rotation failed: {}"

    def __init__(self, secret_name, error):
        super(RotationError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_name,
                                                                             str(error)))
        self._secret_name = secret_name
        self._error = error

    @property
    def secret_name(self):
        return self._secret_name

    @property
    def error(self):
        return self._error


class SecretObjectNotFound(RotationError):
    CUSTOM_ERROR_MESSAGE = "Secret {} rotation failed: no swarm secret named {}"


class NewSecretCreateError(RotationError):
    CUSTOM_ERROR_MESSAGE = "Secret {} rotation failed creating {}: {}"

    def __init__(self, secret_name, new_secret_name, error):
        super(RotationError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_name,
                                                                             new_secret_name,
                                                                             str(error)))
        self._secret_name = secret_name
        self._new_secret_name = new_secret_name
        self._error = error

    @property
    def new_secret_name(self):
        return self._new_secret_name


class PropagationError(RotationError):
    CUSTOM_ERROR_MESSAGE = "Secret {} rotation failed updating service {}: {}"

    def __init__(self, secret_name, service_name, error):
        super(RotationError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_name,
                                                                             service_name,
                                                                             str(error)))
        self._secret_name = secret_name
        self._service_name = service_name
        self._error = error

    @property
    def service_name(self):
        return self._service_name


class CleanupError(SecretRotatorError):
    CUSTOM_ERROR_MESSAGE = "Failed to remove superseded secret {} ({}): {}"

    def __init__(self, secret_name, secret_id, error):
        super(CleanupError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_name,
                                                                            secret_id,
                                                                            str(error)))
        self._secret_name = secret_name
        self._secret_id = secret_id
        self._error = error

    @property
    def secret_name(self):
        return self._secret_name

    @property
    def secret_id(self):
        return self._secret_id

    @property
    def error(self):
        return self._error
