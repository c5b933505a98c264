"""Failures a flow can surface to its caller."""

from dataclasses import dataclass


class FlowError(RuntimeError):
    """Base class for every error raised by a flow."""


@dataclass(frozen=True)
class FieldIssue:
    path: str
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


class ValidationError(FlowError):
    """Input or output did not match its schema. Never retried."""

    def __init__(self, schema: str, issues: list[FieldIssue]) -> None:
        self.schema = schema
        self.issues = issues
        details = "; ".join(str(issue) for issue in issues)
        super().__init__(f"{schema} failed validation: {details}")

    @property
    def paths(self) -> list[str]:
        return [issue.path for issue in self.issues]


class EmptyResponseError(FlowError):
    """The model answered but returned no usable payload."""


class RetryableProviderError(FlowError):
    """Transient provider condition: overload, rate limit, quota exhaustion."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ExhaustedRetriesError(FlowError):
    """Raised once the retry ceiling is reached on a transient failure."""

    def __init__(self, label: str, attempts: int, last_error: BaseException) -> None:
        self.label = label
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{label} failed after {attempts} attempts due to provider problems "
            f"(overload, rate limits). Please try again later. Last error: {last_error}"
        )


class GenerationFailedError(FlowError):
    """The image generation step produced no image."""
