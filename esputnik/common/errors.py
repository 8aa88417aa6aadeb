"""
ESputnik connector exceptions.
"""

from __future__ import annotations


NOT_FOUND = 404
UNAUTHORIZED = 401
BAD_REQUEST = 400


class ESputnikError(Exception):
    """Raised when the API answers with a client error the connector maps.

    ``code`` mirrors the HTTP status (404, 401, 400). The underlying
    ``requests.HTTPError`` is kept as ``__cause__``.
    """

    def __init__(self, message: str, code: int | None = None, response_body: str | None = None):
        self.message = message
        self.code = code
        self.response_body = response_body
        super().__init__(self.message)

    @property
    def is_not_found(self) -> bool:
        return self.code == NOT_FOUND

    def __repr__(self) -> str:
        return f"ESputnikError({self.message!r}, code={self.code!r})"
