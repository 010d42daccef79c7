"""Exceptions for the offline harvesting tools."""


class HarvestError(Exception):
    """Base exception for harvesting failures."""


class ScraperBlockedError(HarvestError):
    """The site kept answering 403 after every retry."""

    def __init__(self, url: str, attempts: int):
        self.url = url
        self.attempts = attempts
        super().__init__(f"Blocked by site (403) after {attempts} attempts: {url}")
