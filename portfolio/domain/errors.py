from __future__ import annotations

class NotFoundError(Exception):
    def __init__(self, what: str = "Resource"):
        super().__init__(what)
        self.what = what

class ConflictError(Exception):
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

class ValidationError(Exception):
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

class FileIOError(Exception):
    """A blob could not be written. Always aborts the surrounding mutation."""
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

class UnauthorizedError(Exception):
    def __init__(self, detail: str = "Admin credentials required"):
        super().__init__(detail)
        self.detail = detail
