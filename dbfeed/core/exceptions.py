"""
Custom exceptions for document construction.
"""

from typing import Optional


class DbFeedError(Exception):
    """Base exception for all dbfeed errors."""
    pass


class ConnectorConfigError(DbFeedError):
    """
    Error in a connector specification.

    Raised when:
    - The connector YAML is missing or not a mapping
    - Required configuration values are not set
    """

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class DocumentBuildError(DbFeedError):
    """
    A single row could not be turned into a document.

    The row is skipped for this pass; traversal of other rows continues.
    """

    def __init__(self, message: str, doc_id: Optional[str] = None):
        super().__init__(message)
        self.doc_id = doc_id


class MissingPrimaryKeyColumnError(DocumentBuildError):
    """A configured primary key column is absent from the row, or null."""

    def __init__(self, column: str, message: Optional[str] = None):
        super().__init__(message or f"Primary key column '{column}' not found in row")
        self.column = column


class RowSerializationError(DocumentBuildError):
    """
    The row cannot be canonically serialized.

    Raised when:
    - A column holds a value type the serializer does not support
    - A column required by the content strategy is null
    """

    def __init__(self, message: str, column: Optional[str] = None, doc_id: Optional[str] = None):
        super().__init__(message, doc_id=doc_id)
        self.column = column


class ContentAcquisitionError(DocumentBuildError):
    """
    Large-object content could not be opened or read.

    The row is eligible for retry on the next traversal pass.
    """

    def __init__(self, message: str, column: Optional[str] = None, doc_id: Optional[str] = None):
        super().__init__(message, doc_id=doc_id)
        self.column = column


class SnapshotEncodingError(DbFeedError, AssertionError):
    """The two-field snapshot JSON could not be built. Internal invariant break."""
    pass
