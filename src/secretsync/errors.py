"""Exception hierarchy for secret synchronization."""


class SecretSyncError(Exception):
    """Base class for all secretsync errors."""


class ConfigError(SecretSyncError):
    """Configuration is missing or malformed. Raised before any network call."""


class InvalidKeyError(SecretSyncError):
    """The recipient public key is structurally invalid.

    Fatal for the whole run: no ciphertext can be produced without a valid
    key, so this is raised once before any action is attempted.
    """


class EncodeError(SecretSyncError):
    """Malformed input to base64 encoding or decoding."""


class RemoteError(SecretSyncError):
    """A single call to the remote secrets API failed.

    Attributes:
        status_code: HTTP status of the response, or None when the request
            never produced one (connection error, timeout).
        message: Human-readable description of the failure.
    """

    def __init__(self, status_code: int | None, message: str) -> None:
        self.status_code = status_code
        self.message = message
        if status_code is None:
            super().__init__(message)
        else:
            super().__init__(f"HTTP {status_code}: {message}")
