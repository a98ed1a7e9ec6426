"""
errors.py - Exceptions raised by the maintenance engine
"""


class MaintenanceError(Exception):
    """Base class for engine errors."""


class RemoteQueryError(MaintenanceError):
    """A count/statistics query against a feature source failed."""

    def __init__(self, message: str, where: str | None = None):
        super().__init__(message)
        self.where = where
