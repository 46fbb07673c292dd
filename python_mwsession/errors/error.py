from typing import Any, Optional


class MwSessionError(Exception):
    """Base error for mwsession"""
    def __init__(self, message: str = None, source: Exception = None):
        self.message = message
        self.source = source
        super().__init__(self.__str__())

    def __str__(self):
        msg = self.message or self.__class__.__name__
        if self.source:
            return f"{msg}: {self.source}"
        return msg

class TransportError(MwSessionError):
    pass

class ResponseDecodeError(TransportError):
    pass

class AuthError(MwSessionError):
    pass

class ValidationError(MwSessionError):
    pass

class ConfigError(MwSessionError):
    pass

class CookieError(MwSessionError):
    pass


class ApiError(MwSessionError):
    """Non-success HTTP response from the API.

    If the body parsed as JSON and carries an ``error`` object, its ``code`` and
    ``info`` are lifted onto the exception and folded into the message.
    """

    def __init__(
        self,
        status: int,
        response_text: str,
        response_data: Optional[Any] = None,
        message: Optional[str] = None,
    ):
        self.status = status
        self.response_text = response_text
        self.response_data = response_data
        self.code: Optional[str] = None
        self.info: Optional[str] = None

        error = response_data.get("error") if isinstance(response_data, dict) else None
        if isinstance(error, dict):
            self.code = error.get("code")
            self.info = error.get("info")

        if message is None:
            message = f"Request failed with status {status}"
            if self.info:
                message = f"{message}: {self.info} (Code: {self.code or 'N/A'})"
            elif self.code:
                message = f"{message} (Code: {self.code})"
        super().__init__(message)


class LoginFailedError(AuthError):
    """Login completed the handshake but the server did not report Success."""

    def __init__(self, result: Optional[str], reason: Optional[Any] = None, response: Optional[Any] = None):
        self.result = result
        self.reason = reason or "Unknown reason"
        self.response = response
        super().__init__(f"Login failed. Result: {result}, Reason: {self.reason}")
