"""
vSession Library Exceptions
"""

class VSessionError(Exception):
    """Base exception for all vSession errors"""
    def __init__(self, message, code=None, details=None):
        super().__init__(message)
        self.code = code
        self.details = details or {}


class InvalidEndpointError(VSessionError):
    """SDK URL could not be parsed"""
    pass


class ConnectionError(VSessionError):
    """Connection-related errors"""
    pass


class UnsupportedAuthModeError(VSessionError):
    """Authentication mode not supported by the endpoint"""
    pass


class CertificateLoadError(VSessionError):
    """Client certificate or key could not be loaded"""
    pass


class AuthenticationError(VSessionError):
    """Authentication failure"""
    pass


class ResourceError(VSessionError):
    """Inventory lookup errors"""
    def __init__(self, message, kind, name="", code=None, details=None):
        super().__init__(message, code=code, details=details)
        self.kind = kind
        self.name = name
        self.details.setdefault('kind', kind)
        self.details.setdefault('name', name)


class ResourceNotFoundError(ResourceError):
    """No inventory object matched"""
    def __init__(self, message, kind, name="", default=False, **kwargs):
        super().__init__(message, kind, name, **kwargs)
        self.default = default


class AmbiguousResourceError(ResourceError):
    """More than one inventory object matched"""
    pass


class DefaultAmbiguousResourceError(AmbiguousResourceError):
    """No name was given and more than one default candidate exists"""
    pass


class CancelledError(VSessionError):
    """Session creation was cancelled"""
    pass
