"""Shared test fixtures for the dbfeed test suite."""

import io
import tempfile
from typing import Optional

import pytest

from dbfeed.core.connector_spec import ConnectorSpec


def make_spec(
    connector_name: str = "testconnector",
    primary_keys: Optional[list[str]] = None,
    ext_metadata_type: str = "",
    **kwargs,
) -> ConnectorSpec:
    """Helper to create connector specs for testing."""
    return ConnectorSpec(
        connector_name=connector_name,
        primary_keys=primary_keys if primary_keys is not None else ["id", "lastName"],
        ext_metadata_type=ext_metadata_type,
        **kwargs,
    )


def standard_row(**overrides) -> dict:
    """A row shaped like the ones the query layer hands over."""
    row = {"id": 1, "lastName": "last_01"}
    row.update(overrides)
    return row


class FakeLocator:
    """A re-openable large object that records how often it was opened."""

    def __init__(self, data: bytes, fail: bool = False):
        self.data = data
        self.fail = fail
        self.streams: list[io.BytesIO] = []

    @property
    def opened(self) -> int:
        return len(self.streams)

    def open(self):
        if self.fail:
            raise OSError("locator unavailable")
        stream = io.BytesIO(self.data)
        self.streams.append(stream)
        return stream


class BrokenStream:
    """A one-shot stream that fails halfway through and tracks closing."""

    def __init__(self):
        self.closed = False
        self._calls = 0

    def read(self, size=-1):
        self._calls += 1
        if self._calls > 1:
            raise IOError("connection reset")
        return b"partial"

    def close(self):
        self.closed = True


@pytest.fixture
def spools(monkeypatch):
    """Every spooled temporary file created while acquiring large objects."""
    created = []
    real = tempfile.SpooledTemporaryFile

    def recording(*args, **kwargs):
        spool = real(*args, **kwargs)
        created.append(spool)
        return spool

    monkeypatch.setattr("dbfeed.core.lob.tempfile.SpooledTemporaryFile", recording)
    return created


def open_spools(spools) -> list:
    return [spool for spool in spools if not spool.closed]
