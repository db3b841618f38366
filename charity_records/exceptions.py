# charity_records/exceptions.py
from typing import Dict


class RecordError(Exception):
    """Base class for errors raised by record operations."""

    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationFailed(RecordError):
    """A form submission failed validation. ``errors`` maps field -> message."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("Validation failed")
        self.errors = errors


class RecordNotFound(RecordError):
    status_code = 404


class ActionForbidden(RecordError):
    status_code = 403


class CorruptBackupError(RecordError):
    """The backup file is unreadable or lacks a required collection."""


class UnsupportedFileType(RecordError):
    status_code = 415
