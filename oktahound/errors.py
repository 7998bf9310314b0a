"""Error taxonomy for OktaHound.

Transport failures surface as :class:`OktaApiError`. The resource iterator
classifies them and either raises one of the integration errors below,
logs and continues, or re-raises the transport error unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class OktaApiError(Exception):
    """Raised for any Okta API response with status >= 400.

    Usage:
        raise OktaApiError(403, url, error_summary="You do not have permission")
    """

    def __init__(
        self,
        status: int,
        url: str,
        error_summary: Optional[str] = None,
        error_code: Optional[str] = None,
        error_id: Optional[str] = None,
    ):
        message = f"Okta API error {status} for {url}"
        if error_summary:
            message = f"{message}: {error_summary}"
        super().__init__(message)
        self.status = status
        self.url = url
        self.error_summary = error_summary
        self.error_code = error_code
        self.error_id = error_id


class IntegrationError(Exception):
    """Base exception for integration failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class IntegrationValidationError(IntegrationError):
    """Raised when the configuration cannot be used to run the integration."""


class IntegrationMissingKeyError(IntegrationError):
    """Raised when an entity expected to be in the job state is missing."""


class DuplicateKeyError(IntegrationError):
    """Raised when an entity or relationship key was already added."""

    def __init__(self, key: str):
        super().__init__(f"Duplicate key detected (key={key})", details={"key": key})
        self.key = key


class ProviderApiError(IntegrationError):
    """Provider call failure carrying the failing endpoint and status."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        status: Optional[int] = None,
        status_text: Optional[str] = None,
    ):
        details = {"endpoint": endpoint, "status": status, "status_text": status_text}
        super().__init__(message, details=details)
        self.endpoint = endpoint
        self.status = status
        self.status_text = status_text


class ProviderAuthenticationError(ProviderApiError):
    """Raised when the credentials cannot be used at all. Aborts the run."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        status: Optional[int] = None,
        status_text: Optional[str] = None,
    ):
        super().__init__(
            f"Provider authentication failed at {endpoint}: {status} {status_text}",
            endpoint=endpoint,
            status=status,
            status_text=status_text,
        )


class ProviderAuthorizationError(ProviderApiError):
    """Raised when the credentials lack permission for an endpoint."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        status: Optional[int] = None,
        status_text: Optional[str] = None,
    ):
        super().__init__(
            f"Provider authorization failed at {endpoint}: {status} {status_text}",
            endpoint=endpoint,
            status=status,
            status_text=status_text,
        )
