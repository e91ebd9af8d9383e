"""
Error taxonomy shared by every model operation.

Four failure kinds are distinguished:

1. ModelException: a local precondition was violated (missing id, missing
   argument, duplicate create, double-set of a single association). No request
   was sent.
2. RequestException: the transport call itself failed (connection refused,
   timeout, undecodable body).
3. ResponseException: the transport succeeded but the envelope status is not
   "success".
4. DataException: the envelope is a success but its data does not have the
   shape the operation expects.
"""
from typing import Any, Dict, Optional


class T6SException(Exception):
    """Base class of the backend errors."""

    def __init__(self, message: str, attempt_number: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.attempt_number = attempt_number

    def to_json_object(self) -> Dict[str, Any]:
        """Description sent back to admin clients."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "attemptNumber": self.attempt_number,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ModelException(T6SException):
    """Misuse of the model API detected before any request."""


class RequestException(T6SException):
    """The transport could not deliver the request or decode its answer."""

    def __init__(
        self,
        message: str,
        url: str,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
        response: Optional[str] = None,
        attempt_number: int = 0,
    ) -> None:
        super().__init__(message, attempt_number)
        self.url = url
        self.cause = cause
        self.status_code = status_code
        self.response = response

    def to_json_object(self) -> Dict[str, Any]:
        data = super().to_json_object()
        data.update({"url": self.url, "statusCode": self.status_code})
        return data


class ResponseException(T6SException):
    """The server answered with an envelope whose status is not a success."""

    def __init__(self, message: str, url: str, envelope: Any = None, attempt_number: int = 0) -> None:
        super().__init__(message, attempt_number)
        self.url = url
        self.envelope = envelope

    def to_json_object(self) -> Dict[str, Any]:
        data = super().to_json_object()
        data.update({"url": self.url, "envelope": self.envelope})
        return data


class DataException(T6SException):
    """A successful envelope carried data with the wrong shape."""

    def __init__(self, message: str, url: Optional[str] = None, data: Any = None, attempt_number: int = 0) -> None:
        super().__init__(message, attempt_number)
        self.url = url
        self.data = data

    def to_json_object(self) -> Dict[str, Any]:
        result = super().to_json_object()
        result.update({"url": self.url, "data": self.data})
        return result
