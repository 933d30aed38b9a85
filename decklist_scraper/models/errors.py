"""
Error taxonomy for the ingestion pipeline.

Every per-link failure is one of these. The orchestrator catches them at the
link boundary and records the message in ``scraped_links``; only a failed
discovery propagates out of a run.
"""


class ScraperError(Exception):
    """Base class for pipeline failures."""

    pass


class NetworkError(ScraperError):
    """Raised when a request times out or the connection fails."""

    pass


class HttpError(ScraperError):
    """Raised when a source answers with a non-success status."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"HTTP {status_code} for {url}")
        self.status_code = status_code
        self.url = url


class NotFoundError(ScraperError):
    """Raised when a source explicitly reports that a page has no results."""

    pass


class ParseError(ScraperError):
    """Raised when an expected structural element is missing from a page."""

    pass


class PersistenceError(ScraperError):
    """Raised when writing to the relational store fails."""

    pass
