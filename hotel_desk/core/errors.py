"""
Error types raised by the service desk.
"""


class HotelDeskError(Exception):
    """Base class for service desk errors."""


class TableValidationError(HotelDeskError, ValueError):
    """A routing, response or phrase table is incomplete or malformed."""


class UnsupportedLanguageError(HotelDeskError, ValueError):
    """A language code outside the configured set was requested."""


class GenerationError(HotelDeskError):
    """A generative text backend failed or returned nothing usable."""

    def __init__(self, message: str, backend: str = "unknown"):
        super().__init__(message)
        self.backend = backend
