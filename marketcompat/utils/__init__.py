"""
Utility modules for marketcompat: logging configuration and the exception
hierarchy shared by every component.
"""

from marketcompat.utils.error_handling import (
    CompatError,
    ConfigurationError,
    InputValidationError,
    ResourceError,
    AcquisitionError,
    NetworkError,
    MalformedUpstreamDataError,
    AllMethodsExhaustedError,
    SourceFailure,
)

__all__ = [
    'CompatError',
    'ConfigurationError',
    'InputValidationError',
    'ResourceError',
    'AcquisitionError',
    'NetworkError',
    'MalformedUpstreamDataError',
    'AllMethodsExhaustedError',
    'SourceFailure',
]
