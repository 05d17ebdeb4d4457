from __future__ import annotations
from typing import Optional


class ProviderError(Exception):
    """Base class for provider-level failures."""


class ProviderClientError(ProviderError):
    """
    Non-retryable: caller/config issue (missing credential, unknown backend kind,
    a request the backend refused). The fix is change input/config, not retry.
    """


class ProviderTransientError(ProviderError):
    """
    Retryable: network hiccups, timeouts, connection resets.
    Retrying with backoff is appropriate.
    """


class ProviderNotConfiguredError(ProviderClientError):
    """No credential/client where the backend requires one. Prompt for /login."""


class ProviderTransportError(ProviderTransientError):
    """The backend could not be reached."""


class BackendRejectedError(ProviderClientError):
    """The backend answered with a non-success status. Body is passed through verbatim."""

    def __init__(self, status_code: int, body: str = "", message: Optional[str] = None):
        self.status_code = int(status_code)
        self.body = body or ""
        super().__init__(message or f"HTTP {self.status_code}: {self.body}")


class ProviderCancelledError(ProviderError):
    """The call was aborted through its cancel signal. Not a failure worth retrying."""


class UnknownBackendKindError(ProviderClientError):
    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unknown provider type: {kind}")
