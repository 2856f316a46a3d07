"""Document ID generator: base64 of the escaped primary key values."""

import base64
import binascii
from typing import Any, Mapping, Sequence

from dbfeed.core.exceptions import MissingPrimaryKeyColumnError
from dbfeed.core.hashing import serialize_value

DELIMITER = ","
ESCAPE = "\\"


def _escape(value: str) -> str:
    return value.replace(ESCAPE, ESCAPE + ESCAPE).replace(DELIMITER, ESCAPE + DELIMITER)


def generate_doc_id(primary_key: Sequence[str], row: Mapping[str, Any]) -> str:
    """Generate the document ID for a row.

    Args:
        primary_key: resolved primary key column names, in order
        row: column name -> value

    Returns:
        String like "MSxsYXN0XzAx" (base64 of "1,last_01")
    """
    parts = []
    for column in primary_key:
        if column not in row:
            raise MissingPrimaryKeyColumnError(column)
        value = row[column]
        if value is None:
            raise MissingPrimaryKeyColumnError(
                column, f"Primary key column '{column}' is null"
            )
        parts.append(_escape(serialize_value(value, column)))
    joined = DELIMITER.join(parts)
    return base64.b64encode(joined.encode("utf-8")).decode("ascii")


def decode_doc_id(doc_id: str) -> list[str]:
    """Split a document ID back into its primary key value strings."""
    try:
        decoded = base64.b64decode(doc_id.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError) as e:
        raise ValueError(f"Invalid document ID '{doc_id}': {e}") from e

    values = []
    current = []
    escaped = False
    for ch in decoded:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == ESCAPE:
            escaped = True
        elif ch == DELIMITER:
            values.append("".join(current))
            current = []
        else:
            current.append(ch)
    values.append("".join(current))
    return values
