"""Snapshot pass — turns one traversal's rows into snapshots.

A row that cannot be turned into a document is recorded as an error and
skipped; the rest of the pass continues and the row is retried on the next
pass. When the previous pass's snapshots are supplied, changed rows also get
their Handle built.

Fetching rows and persisting snapshots are left to the caller. Large-object
content of unchanged and failed rows is released here; the caller closes each
returned Handle once it has been delivered. Without a previous pass every
snapshot keeps its content; PassResult.close releases all of it.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from dbfeed.core.document_builder import DocumentBuilder, Handle, Row, Snapshot, build_snapshot
from dbfeed.core.exceptions import DocumentBuildError

logger = logging.getLogger(__name__)


@dataclass
class PassStats:
    """Tracks snapshot pass statistics."""
    rows: int = 0
    snapshots: int = 0
    changed: int = 0
    unchanged: int = 0
    errors: int = 0

    def as_dict(self) -> dict:
        return {
            "rows": self.rows,
            "snapshots": self.snapshots,
            "changed": self.changed,
            "unchanged": self.unchanged,
            "errors": self.errors,
        }


@dataclass
class RowError:
    row_index: int
    error_type: str
    message: str
    doc_id: Optional[str] = None


@dataclass
class PassResult:
    """Result of a snapshot pass."""
    snapshots: list[Snapshot] = field(default_factory=list)
    handles: list[Handle] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)
    stats: PassStats = field(default_factory=PassStats)

    def close(self) -> None:
        for snapshot in self.snapshots:
            snapshot.close()


def run_snapshot_pass(
    builder: DocumentBuilder,
    rows: Iterable[Row],
    previous: Optional[Mapping[str, str]] = None,
) -> PassResult:
    """Build snapshots for every row of a traversal.

    Args:
        builder: the connector's selected content strategy
        rows: rows in traversal order
        previous: document ID -> serialized snapshot from the previous pass
    """
    result = PassResult()
    stats = result.stats

    for index, row in enumerate(rows):
        stats.rows += 1
        try:
            snapshot = build_snapshot(builder, row)
        except DocumentBuildError as e:
            logger.warning(f"Skipping row {index}: {e}")
            result.errors.append(RowError(
                row_index=index,
                error_type=type(e).__name__,
                message=str(e),
                doc_id=e.doc_id,
            ))
            stats.errors += 1
            continue

        result.snapshots.append(snapshot)
        stats.snapshots += 1

        if previous is None:
            continue

        try:
            handle = snapshot.get_update(previous.get(snapshot.doc_id))
        except DocumentBuildError as e:
            logger.warning(f"Failed to build document for {snapshot.doc_id}: {e}")
            snapshot.close()
            result.errors.append(RowError(
                row_index=index,
                error_type=type(e).__name__,
                message=str(e),
                doc_id=snapshot.doc_id,
            ))
            stats.errors += 1
            continue

        if handle is None:
            snapshot.close()
            stats.unchanged += 1
        else:
            result.handles.append(handle)
            stats.changed += 1

    logger.info(f"Snapshot pass finished: {stats.as_dict()}")
    return result
