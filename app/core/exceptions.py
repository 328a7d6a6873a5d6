# app/core/exceptions.py


class WorkflowError(Exception):
    """Base class for workflow engine errors."""


class WorkflowRequestError(WorkflowError):
    """Malformed run request (no steps or no input). No run is created."""


class ProviderError(WorkflowError):
    """A single LLM provider failed (network, HTTP status or response shape)."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class CircuitOpenError(ProviderError):
    """The provider's circuit breaker is open and the call was not attempted."""


class StructuredOutputError(WorkflowError):
    """Model output never validated against the schema within the attempt cap."""

    def __init__(self, schema_name: str, last_error: str, attempts: int):
        super().__init__(
            f"Failed to get valid {schema_name} output after {attempts} attempts: {last_error}"
        )
        self.schema_name = schema_name
        self.last_error = last_error
        self.attempts = attempts
