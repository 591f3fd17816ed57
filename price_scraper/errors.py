"""Exception taxonomy for the extraction pipeline.

Data, network and render errors are converted into failed results by the tier
that raised them. ``ConfigurationError`` is the exception: it signals a
misconfigured deployment and is allowed to propagate to the caller.
"""

from typing import Iterable, Optional


class ScraperError(Exception):
    """Base class for pipeline errors."""

    def __init__(self, url: Optional[str], reason: str):
        self.url = url
        self.reason = reason
        super().__init__(reason)

    @property
    def kind(self) -> str:
        """Taxonomy name reported as ``ExtractionResult.error_type``."""
        return type(self).__name__


class NetworkError(ScraperError):
    """Connection failure, non-2xx response or request timeout."""

    def __init__(self, url: Optional[str], reason: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(url, reason)


class RenderError(ScraperError):
    """Navigation timeout or in-page evaluation failure."""


class ParseError(ScraperError):
    """Required fields were not found by the selector rules."""

    def __init__(self, url: Optional[str], missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(url, f"Could not extract required fields: {', '.join(self.missing)}")


class AIExtractionError(ScraperError):
    """Model call failed or returned no usable data."""


class ConfigurationError(Exception):
    """A required setting is missing or invalid."""

    def __init__(self, setting: str, message: str):
        self.setting = setting
        super().__init__(message)
