"""Errors raised by the complaint store and upload storage."""


class StorageError(Exception):
    """The database could not be reached or a query failed."""


class UploadError(StorageError):
    """An uploaded image could not be written to the uploads directory."""
