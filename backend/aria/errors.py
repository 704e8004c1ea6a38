"""Exception hierarchy for ARIA services."""


class AriaError(Exception):
    """Base class for service errors."""

    status_code = 500


class ValidationError(AriaError):
    """Request is missing required data or carries invalid values."""

    status_code = 400


class NotFoundError(AriaError):
    status_code = 404


class AccessDeniedError(AriaError):
    """Caller is not allowed to use the resource (e.g. expired share token)."""

    status_code = 403


class StorageError(AriaError):
    """Object storage or database write failed."""


class EmbeddingError(AriaError):
    status_code = 502


class ExtractionError(AriaError):
    """No extraction method produced text for a document."""


class ParseError(AriaError):
    """A model response did not contain the expected JSON."""

    status_code = 502


class SchemaValidationError(ValidationError):
    """A suggested schema contains an unsafe identifier or unknown type."""


class ProviderError(AriaError):
    """A language-model provider call failed."""

    status_code = 502

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ProviderNotConfigured(ProviderError):
    def __init__(self, provider: str):
        super().__init__(provider, "API key not configured")


class UnsupportedProvider(ProviderError):
    status_code = 400

    def __init__(self, provider: str):
        super().__init__(provider, "unsupported model provider")


class AllProvidersFailed(ProviderError):
    """Every provider in a fallback chain failed."""

    def __init__(self, errors: dict[str, Exception]):
        self.errors = errors
        summary = "; ".join(f"{name}: {err}" for name, err in errors.items())
        AriaError.__init__(self, f"all providers failed ({summary})")
        self.provider = ",".join(errors)
