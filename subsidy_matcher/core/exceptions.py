"""Application exception hierarchy."""


class SubsidyMatcherError(Exception):
    """Base exception for all subsidy matcher errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CatalogError(SubsidyMatcherError):
    """The subsidy catalog could not be read."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.source = source


class AIProcessingError(SubsidyMatcherError):
    """Error during AI/LLM processing."""

    def __init__(
        self,
        message: str,
        model: str | None = None,
        prompt_preview: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.model = model
        self.prompt_preview = prompt_preview[:200] if prompt_preview else None


class ParsingError(AIProcessingError):
    """Error parsing AI output into structured format."""

    def __init__(
        self,
        message: str,
        raw_output: str | None = None,
        expected_schema: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details=details)
        self.raw_output = raw_output[:500] if raw_output else None
        self.expected_schema = expected_schema


class RateLimitExceeded(AIProcessingError):
    """No rate-limit slot is available within the allowed wait."""

    def __init__(
        self,
        message: str,
        wait_seconds: float = 0.0,
        details: dict | None = None,
    ):
        super().__init__(message, details=details)
        self.wait_seconds = wait_seconds


class AuditLogError(SubsidyMatcherError):
    """Error while writing a compliance event."""

    def __init__(
        self,
        message: str,
        sink: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.sink = sink
