"""Exception types for portal scraping errors.

The portal scraper makes assumptions about the result grid, the document
viewer and the payload returned by the PDF handler. When one of these
assumptions is violated for a single document, the pipeline raises one of
the exceptions below internally, logs it and skips the document. Only
``NavigationAnomalyException`` and ``CollaboratorUnavailableException``
are allowed to end a run.
"""

from typing import Any


class PortalAssumptionException(Exception):
    """Base class for portal assumption violations.

    Subclasses provide specific context about what assumption was violated
    so that log lines are enough to diagnose a misbehaving page.
    """

    def __init__(
        self,
        message: str,
        url: str = "",
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the assumption violation.
            url: The page or download URL involved, if known.
            context: Optional dict of additional context (selector, counts, etc).
        """
        self.message = message
        self.url = url
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context.

        Returns:
            Formatted error message string.
        """
        parts = [self.message]
        if self.url:
            parts.append(f"URL: {self.url}")

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class CredentialNotFoundException(PortalAssumptionException):
    """Raised when no document session key could be resolved.

    The document viewer frame is attached asynchronously, so this is only
    raised after the bounded polling in ``resolve_session_key`` gives up.
    """

    def __init__(self, file_name: str, attempts: int, url: str = "") -> None:
        self.file_name = file_name
        self.attempts = attempts
        super().__init__(
            f"Could not find PDF session key for {file_name} "
            f"after {attempts} attempts",
            url,
            {"attempts": attempts},
        )


class InvalidArtifactException(PortalAssumptionException):
    """Raised when the downloaded payload is not a PDF.

    The usual cause is the PDF handler answering with an HTML error page
    instead of the document.

    Attributes:
        size: Number of bytes received.
        preview: Printable rendition of the first bytes.
    """

    def __init__(self, size: int, preview: str, url: str = "") -> None:
        self.size = size
        self.preview = preview
        super().__init__(
            f"Response is not a valid PDF ({size} bytes)",
            url,
            {"first_bytes": preview},
        )


class NavigationAnomalyException(PortalAssumptionException):
    """Raised when the pager did not move forward by exactly one page.

    Continuing after such an anomaly risks reprocessing the same page
    forever, so the run stops instead.
    """

    def __init__(
        self,
        expected_page: int,
        actual_page: int | None,
        expected_total: int,
        actual_total: int | None,
        reason: str = "",
    ) -> None:
        self.expected_page = expected_page
        self.actual_page = actual_page
        self.expected_total = expected_total
        self.actual_total = actual_total
        self.reason = reason
        context: dict[str, Any] = {
            "expected_page": expected_page,
            "actual_page": actual_page,
            "expected_total": expected_total,
            "actual_total": actual_total,
        }
        if reason:
            context["reason"] = reason
            message = (
                f"Could not advance to page {expected_page} of "
                f"{expected_total}: {reason}"
            )
        else:
            message = (
                f"Pagination did not advance as expected: wanted page "
                f"{expected_page} of {expected_total}, found page "
                f"{actual_page} of {actual_total}"
            )
        super().__init__(message, context=context)


class CollaboratorUnavailableException(Exception):
    """Raised when the browser or the store cannot be initialized.

    This is fatal: the run never starts.
    """

    def __init__(self, collaborator: str, reason: str) -> None:
        self.collaborator = collaborator
        self.reason = reason
        self.message = f"Could not initialize {collaborator}: {reason}"
        super().__init__(self.message)
