"""
Error taxonomy for the aggregation engine.

None of these escape an aggregation call: each per-source sub-pipeline
recovers its own errors and contributes an empty list.
"""


class AggregationError(Exception):
    """Base class for recoverable per-source failures."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source


class TransportError(AggregationError):
    """Network failure, timeout, or non-2xx response."""

    def __init__(self, message: str, source: str | None = None, status_code: int | None = None):
        super().__init__(message, source)
        self.status_code = status_code


class ParseError(AggregationError):
    """Payload is malformed for the expected format."""

    pass


class ValidationError(AggregationError):
    """Record is missing a mandatory normalized field."""

    pass
