# -*- encoding: utf-8 -*-

class IIIFException(Exception):
    """Base exception class for all errors raised by iiif_processor."""
    pass


class ConfigError(IIIFException):
    """Raised for errors in the user config or construction options."""
    pass


class VersionResolutionError(IIIFException):
    """The request URL carries no IIIF version and none was configured."""
    pass


class UnsupportedVersionError(IIIFException):
    pass


class RequestException(IIIFException):
    """Base class for errors caused by the request itself."""
    pass


class MalformedUrlError(RequestException):
    pass


class InvalidRegionError(RequestException):
    pass


class InvalidSizeError(RequestException):
    pass


class InvalidRotationError(RequestException):
    pass


class InvalidQualityError(RequestException):
    pass


class InvalidFormatError(RequestException):
    pass


class StreamResolutionError(IIIFException):
    pass


class DimensionResolutionError(IIIFException):
    pass


class TransformException(IIIFException):
    pass
