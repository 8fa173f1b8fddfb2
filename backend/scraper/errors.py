"""Errors raised by the scraping pipeline."""


class ScraperError(Exception):
    """Raised when scraping fails."""

    pass


class FetchError(ScraperError):
    """Raised when neither relay proxy returns usable content."""

    pass


class ContentNotFoundError(ScraperError):
    """Raised when a page has no recognizable content root."""

    pass


class NoQuestionContentError(ScraperError):
    """Raised when segmentation finds no question markup."""

    pass
