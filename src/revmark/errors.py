"""Custom exceptions used across revmark."""

__all__ = [
    "RevmarkError",
    "InputError",
    "InvalidDimensionsError",
    "RenderError",
    "CancelledError",
    "GeometryWarning",
]


class RevmarkError(Exception):
    """Base class for every error raised by revmark."""

    pass


class InputError(RevmarkError):
    """Raised when document bytes cannot be opened or read."""

    pass


class InvalidDimensionsError(InputError):
    """Raised when PDF pages have invalid sizes."""

    pass


class RenderError(RevmarkError):
    """Raised when the highlighted document cannot be produced."""

    pass


class CancelledError(RevmarkError):
    """Raised when a comparison operation is cancelled."""

    pass


class GeometryWarning(UserWarning):
    """Category for boxes dropped or clipped because they left the page."""

    pass
