"""
Error types raised by the generation services
"""


class HomeyError(Exception):
    """Base class for errors raised by Homey services"""


class MalformedResponseError(HomeyError, ValueError):
    """The service returned JSON that is missing, unparsable or does not match the expected shape"""


class EmptyResponseError(HomeyError):
    """The service returned no text where text is required"""


class InvalidImageError(HomeyError, ValueError):
    """An uploaded image could not be decoded"""
