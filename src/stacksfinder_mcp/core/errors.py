"""Error taxonomy shared by the engine, the API client and the tool layer."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from .fuzzy import suggest


class ErrorKind(str, Enum):
    """Machine-readable error kinds surfaced to callers."""

    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    TECH_NOT_FOUND = "TECH_NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_INPUT = "INVALID_INPUT"
    API_ERROR = "API_ERROR"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    CONFIG_ERROR = "CONFIG_ERROR"


class CatalogError(Exception):
    """The technology catalog failed its load-time integrity checks."""


class StacksFinderError(Exception):
    """A domain error with a kind and optional suggestions for the caller."""

    def __init__(self, kind: ErrorKind, message: str, suggestions: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.suggestions = list(suggestions or [])

    def to_response_text(self) -> str:
        text = f"**Error ({self.kind.value})**: {self.message}"
        if self.suggestions:
            text += "\n\n**Suggestions**:\n" + "\n".join(f"- {s}" for s in self.suggestions)
        return text


class JobFailedError(StacksFinderError):
    """The server reported that a blueprint job failed or was cancelled."""

    def __init__(self, job_id: str, status: str, error_code: Optional[str], error_message: Optional[str]):
        self.job_id = job_id
        self.status = status
        self.error_code = error_code
        message = error_message or f"Job {status}: {error_code or 'Unknown error'}"
        if error_code and error_message:
            message = f"{error_message} (code: {error_code})"
        super().__init__(ErrorKind.API_ERROR, message)


_DEFAULT_MESSAGES = {
    ErrorKind.UNAUTHORIZED: "API key is invalid or missing. Set STACKSFINDER_API_KEY.",
    ErrorKind.NOT_FOUND: "Resource not found.",
    ErrorKind.RATE_LIMITED: "Rate limit exceeded. Please try again later.",
}


def status_to_kind(status: int) -> ErrorKind:
    """Map an HTTP status code to an error kind."""
    if status in (401, 403):
        return ErrorKind.UNAUTHORIZED
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 429:
        return ErrorKind.RATE_LIMITED
    return ErrorKind.API_ERROR


def api_error(status: int, message: Optional[str] = None) -> StacksFinderError:
    """Build the domain error for a non-2xx response."""
    kind = status_to_kind(status)
    default = _DEFAULT_MESSAGES.get(kind, f"API request failed with status {status}.")
    return StacksFinderError(kind, message or default)


class TechNotFoundError(StacksFinderError):
    """Unknown technology id. ``matches`` holds the closest catalog ids."""

    def __init__(self, tech_id: str, known_ids: Iterable[str]):
        self.tech_id = tech_id
        self.matches = suggest(tech_id, known_ids)
        if self.matches:
            suggestions = [f"Did you mean: {', '.join(self.matches)}?", "Use list_technologies to see all available IDs."]
        else:
            suggestions = ["Use list_technologies to see all available technology IDs."]
        super().__init__(ErrorKind.TECH_NOT_FOUND, f'Unknown technology: "{tech_id}"', suggestions)


class InvalidInputError(StacksFinderError):
    """Tool arguments failed validation. ``problems`` lists each one as ``field: message``."""

    def __init__(self, problems: Iterable[str]):
        self.problems = list(problems)
        super().__init__(ErrorKind.INVALID_INPUT, "Invalid input: " + "; ".join(self.problems))
