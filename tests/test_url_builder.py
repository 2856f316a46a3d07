"""Tests for the URL strategy."""

import pytest

from dbfeed.core.builder_selection import select_document_builder
from dbfeed.core.document_builder import build_snapshot
from dbfeed.core.exceptions import RowSerializationError
from dbfeed.core.models import PROPNAME_DISPLAYURL, PROPNAME_MIMETYPE, PROPNAME_SEARCHURL
from tests.conftest import make_spec, standard_row


def _base_url_spec(**kwargs):
    return make_spec(
        ext_metadata_type="docId",
        document_id_field="id",
        base_url="http://host/docs/",
        **kwargs,
    )


def _complete_url_spec(**kwargs):
    return make_spec(ext_metadata_type="url", document_url_field="url", **kwargs)


def _snapshot(spec, row):
    return build_snapshot(select_document_builder(spec).builder, row)


class TestBaseUrl:
    def test_reference_is_base_plus_id(self):
        doc = _snapshot(_base_url_spec(), standard_row()).get_handle().document
        assert doc.find_property(PROPNAME_SEARCHURL) == "http://host/docs/1"
        assert doc.find_property(PROPNAME_DISPLAYURL) == "http://host/docs/1"

    def test_checksum_matches_metadata_mode(self):
        row = standard_row()
        url_snapshot = _snapshot(_base_url_spec(), row)
        metadata_snapshot = _snapshot(make_spec(), row)
        assert url_snapshot.checksum == metadata_snapshot.checksum
        assert url_snapshot.serialized == metadata_snapshot.serialized

    def test_no_body_content(self):
        doc = _snapshot(_base_url_spec(), standard_row()).get_handle().document
        assert doc.content is None
        assert not doc.has_content
        assert doc.find_property(PROPNAME_MIMETYPE) is None

    def test_metadata_properties_delivered(self):
        doc = _snapshot(_base_url_spec(), standard_row(dept="R&D")).get_handle().document
        assert doc.find_property("dept") == "R&D"
        assert doc.find_property("id") == "1"


class TestCompleteUrl:
    def test_reference_is_column_value(self):
        row = standard_row(url="http://intranet/page?id=1")
        doc = _snapshot(_complete_url_spec(), row).get_handle().document
        assert doc.find_property(PROPNAME_SEARCHURL) == "http://intranet/page?id=1"

    def test_any_column_change_changes_checksum(self):
        a = _snapshot(_complete_url_spec(), standard_row(url="http://a/", title="one"))
        b = _snapshot(_complete_url_spec(), standard_row(url="http://a/", title="two"))
        assert a.checksum != b.checksum

    def test_url_change_changes_checksum(self):
        a = _snapshot(_complete_url_spec(), standard_row(url="http://a/"))
        b = _snapshot(_complete_url_spec(), standard_row(url="http://b/"))
        assert a.checksum != b.checksum

    def test_skipped_column_change_keeps_checksum(self):
        spec = _complete_url_spec(skip_columns=["notes"])
        a = _snapshot(spec, standard_row(url="http://a/", notes="x"))
        b = _snapshot(spec, standard_row(url="http://a/", notes="y"))
        assert a.checksum == b.checksum

    def test_lob_change_keeps_checksum(self):
        spec = _complete_url_spec(lob_field="body")
        a = _snapshot(spec, standard_row(url="http://a/", body=b"one"))
        b = _snapshot(spec, standard_row(url="http://a/", body=b"two"))
        assert a.checksum == b.checksum

    @pytest.mark.parametrize("row", [standard_row(), standard_row(url=None)])
    def test_missing_url_is_row_failure(self, row):
        with pytest.raises(RowSerializationError) as exc:
            _snapshot(_complete_url_spec(), row)
        assert exc.value.column == "url"
        assert exc.value.doc_id == "MSxsYXN0XzAx"
