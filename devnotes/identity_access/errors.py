"""
Error taxonomy for the provider OAuth flow.

Why:
    The web adapter maps each failure to exactly one HTTP status and a public
    message. Keeping the mapping on the exception classes avoids drift between
    the authorize and callback routes and the tests that assert on them.

Security:
    `UpstreamFetchError` keeps its `code` for server-side logs only; the public
    message stays generic so upstream details never reach the browser.
"""
from __future__ import annotations


class AuthFlowError(Exception):
    """Base class for failures that end the OAuth flow with an error response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(AuthFlowError):
    status_code = 500
    default_message = "Provider client ID not configured"


class CsrfMismatchError(AuthFlowError):
    status_code = 400
    default_message = "Invalid state parameter"


class MissingCodeError(AuthFlowError):
    status_code = 400
    default_message = "Authorization code not provided"


class ProviderError(AuthFlowError):
    """The token endpoint answered with an `error` field."""

    status_code = 400
    default_message = "Failed to get access token"


class UpstreamFetchError(AuthFlowError):
    """Unexpected failure while talking to the provider or storage APIs."""

    status_code = 500

    def __init__(self, code: str = "upstream_failed"):
        super().__init__()
        self.code = code


class InvalidTokenError(UpstreamFetchError):
    """The provider rejected the bearer token (HTTP 401)."""

    def __init__(self, code: str = "invalid_token"):
        super().__init__(code)


class AuditUpsertError(Exception):
    """Raised inside the audit upsert; converted to a failed AuditResult."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


__all__ = [
    "AuthFlowError",
    "ConfigurationError",
    "CsrfMismatchError",
    "MissingCodeError",
    "ProviderError",
    "UpstreamFetchError",
    "InvalidTokenError",
    "AuditUpsertError",
]
