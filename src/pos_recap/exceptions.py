"""Domain-specific exceptions for POS Recap.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from PosRecapError for easy catching.

Malformed input rows (bad prices, bad dates, dangling references) are never
reported through these exceptions: they are recovered where they are read.
Only the I/O boundaries (loading a snapshot, writing an export) raise.
"""


class PosRecapError(Exception):
    """Base exception for all POS Recap errors.

    This is the base class for all domain-specific exceptions in the package.
    Users can catch this exception to handle any POS Recap error.
    """

    pass


class ConfigError(PosRecapError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Required environment variables are missing
    - Invalid configuration values are provided
    """

    pass


class DataQualityError(PosRecapError):
    """Raised when a snapshot document has the wrong overall shape.

    This exception is raised when:
    - A snapshot document is not a JSON object
    - A collection in the snapshot is not a list
    """

    pass


class RepositoryError(PosRecapError):
    """Raised when a snapshot cannot be loaded from its source.

    This exception is raised when:
    - The snapshot file is missing or is not valid JSON
    - The POS API cannot be reached or answers with an error status
    - The POS API returns a body that is not JSON
    """

    pass


class ExportError(PosRecapError):
    """Raised when a report export fails.

    This exception is raised when:
    - The PDF rendering library cannot be imported
    - The document cannot be laid out
    - The artifact cannot be written to disk

    An export failure never touches the aggregation it was asked to render.
    """

    pass
