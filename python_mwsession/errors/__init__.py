from .error import (
    MwSessionError, TransportError, ResponseDecodeError, ApiError, AuthError,
    ValidationError, ConfigError, CookieError, LoginFailedError
)
