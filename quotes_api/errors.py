"""Error taxonomy shared by services and adapters.

Each error carries a stable ``code`` (exposed to clients) and the HTTP status
the REST layer answers with. Single-provider failures (``ProviderError``) are
absorbed by the gateway and never reach a client.
"""

from typing import Any


class QuoteServiceError(RuntimeError):
    """Base class for errors surfaced to API clients."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, detail: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ProviderError(QuoteServiceError):
    """A single upstream provider failed (network, timeout, bad status or payload)."""

    code = "PROVIDER_ERROR"
    status_code = 502


class AllProvidersDownError(QuoteServiceError):
    """Every quote provider failed; no quote can be served."""

    code = "ALL_PROVIDERS_DOWN"
    status_code = 503


class QuoteNotFoundError(QuoteServiceError):
    code = "QUOTE_NOT_FOUND"
    status_code = 404

    def __init__(self, quote_id: str):
        super().__init__(f"Quote {quote_id} not found", detail={"quote_id": quote_id})
        self.quote_id = quote_id


class StorageError(QuoteServiceError):
    """The persistence layer failed; aborts the calling request."""

    code = "STORAGE_ERROR"
    status_code = 500
