# portfolio_client/exceptions.py
from __future__ import annotations
from typing import Any


class PortfolioError(Exception):
    def __init__(self, message: str, status_code: int | None = None, detail: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

class BadRequest(PortfolioError):
    pass

class Unauthorized(PortfolioError):
    pass

class NotFound(PortfolioError):
    pass

class Conflict(PortfolioError):
    pass

class ServerError(PortfolioError):
    pass

class TransportError(PortfolioError):
    pass

class MalformedResponse(PortfolioError):
    """A 2xx response whose body is not the expected shape."""
