"""Custom exceptions for Deploy Web."""

from typing import Optional


class DeployWebError(Exception):
    """Base exception for all action errors."""

    status_code: int = 400

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code

    @property
    def message(self) -> str:
        return str(self)


class InputError(DeployWebError):
    """Request parameters are missing or malformed."""
    pass


class MethodNotAllowedError(DeployWebError):
    """Request was not a POST."""

    status_code = 405


class FetchError(DeployWebError):
    """Cloning the repository failed."""
    pass


class DeployError(DeployWebError):
    """The deploy tool failed."""
    pass
