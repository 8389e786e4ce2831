"""Error types raised while scraping a statement page.

Every error derives from :class:`ValueError` so callers that already guard
input validation with ``except ValueError`` keep working.
"""

from typing import Optional


class ScrapeError(ValueError):
    """Base class for anything that stops a statement from being scraped."""


class NotFoundError(ScrapeError):
    """An expected marker element is absent from the document."""


class LayoutNotIdentifiedError(NotFoundError):
    """None of the known page layouts matches the document."""

    def __init__(self, message: str, tried: Optional[tuple[str, ...]] = None):
        self.tried = tried or ()
        if self.tried:
            message = f"{message} (tried: {', '.join(self.tried)})"
        super().__init__(message)


class ParseError(ScrapeError):
    """Text was found but does not match the expected date or amount grammar."""


class AmbiguousMatchError(ScrapeError):
    """An amount cell only holds hidden spans, so no visible value can be chosen."""


__all__ = [
    "ScrapeError",
    "NotFoundError",
    "LayoutNotIdentifiedError",
    "ParseError",
    "AmbiguousMatchError",
]
