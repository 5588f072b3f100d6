"""Structured business error raised across the storefront domain.

Every business-rule failure carries an HTTP-style status code, a
machine-readable code, a human message and optional structured details (for
example the list of cart issues behind a ``CART_INVALID``). The API layer
renders it as the standard error envelope.
"""

from typing import Any


class StorefrontError(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "BAD_REQUEST",
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details

    def to_dict(self) -> dict:
        error = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return error

    def __repr__(self) -> str:
        return f"StorefrontError(code={self.code!r}, status_code={self.status_code}, message={self.message!r})"


def forbidden(message: str = "Access denied") -> StorefrontError:
    return StorefrontError(message, 403, "FORBIDDEN")
