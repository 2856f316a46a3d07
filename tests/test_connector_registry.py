"""Tests for the Connector Registry."""

import logging

import pytest

from dbfeed.core.connector_registry import ConnectorRegistry
from dbfeed.core.document_builder import TraversalContext
from dbfeed.core.exceptions import ConnectorConfigError
from dbfeed.core.lob_builder import LobDocumentBuilder
from dbfeed.core.metadata_builder import MetadataDocumentBuilder
from dbfeed.core.models import ExtMetadataType
from tests.conftest import make_spec

LOB_YAML = """
connector_name: manuals
primary_keys: [id]
ext_metadata_type: lob
lob_field: body
"""

BROKEN_LOB_YAML = """
connector_name: broken
primary_keys: [id]
ext_metadata_type: lob
"""


@pytest.fixture
def registry(tmp_path):
    (tmp_path / "manuals.yaml").write_text(LOB_YAML)
    (tmp_path / "broken.yaml").write_text(BROKEN_LOB_YAML)
    (tmp_path / "_draft.yaml").write_text("connector_name: draft\nprimary_keys: [id]\n")
    return ConnectorRegistry(directory=str(tmp_path))


class TestLoadSpec:
    def test_load_by_connector_name(self, registry):
        spec = registry.get_spec("manuals")
        assert spec.lob_field == "body"

    def test_unknown(self, registry):
        with pytest.raises(FileNotFoundError):
            registry.get_spec("missing")

    def test_underscore_files_loadable_but_not_listed(self, registry):
        assert "draft" not in registry.list_connectors()
        assert registry.get_spec("draft").connector_name == "draft"


class TestSelection:
    def test_selected_once(self, registry):
        first = registry.get_selection("manuals")
        assert isinstance(first.builder, LobDocumentBuilder)
        assert registry.get_selection("manuals") is first

    def test_traversal_context_passed_to_lob_builder(self, tmp_path):
        (tmp_path / "manuals.yaml").write_text(LOB_YAML)
        context = TraversalContext(max_document_size=100)
        registry = ConnectorRegistry(directory=str(tmp_path), traversal_context=context)
        assert registry.get_selection("manuals").builder.traversal_context is context

    def test_fallback_is_per_connector(self, registry, caplog):
        caplog.set_level(logging.INFO)
        broken = registry.get_selection("broken")
        manuals = registry.get_selection("manuals")

        assert isinstance(broken.builder, MetadataDocumentBuilder)
        assert broken.fell_back
        assert registry.get_spec("broken").ext_metadata_type == "lob"
        assert manuals.effective_mode == ExtMetadataType.LOB

    def test_register_replaces_selection(self, registry):
        registry.get_selection("manuals")
        registry.register_spec(make_spec(connector_name="manuals", primary_keys=["id"]))
        assert isinstance(registry.get_selection("manuals").builder, MetadataDocumentBuilder)


class TestValidateSpec:
    def test_valid(self, registry):
        assert registry.validate_spec(make_spec()) == []

    def test_empty_primary_keys(self, registry):
        errors = registry.validate_spec(make_spec(primary_keys=[]))
        assert any("primary_keys" in e for e in errors)

    def test_duplicate_primary_keys(self, registry):
        errors = registry.validate_spec(make_spec(primary_keys=["id", "ID"]))
        assert any("duplicates" in e for e in errors)

    def test_skipped_primary_key(self, registry):
        errors = registry.validate_spec(make_spec(primary_keys=["id"], skip_columns=["id"]))
        assert any("cannot also be skipped" in e for e in errors)

    def test_skipped_primary_key_any_case(self, registry):
        errors = registry.validate_spec(make_spec(primary_keys=["ID"], skip_columns=["id"]))
        assert any("cannot also be skipped" in e for e in errors)

    def test_doc_id_mode_needs_base_url(self, registry):
        spec = make_spec(ext_metadata_type="docId", document_id_field="id")
        assert any("base_url" in e for e in registry.validate_spec(spec))

    def test_register_invalid_raises(self, registry):
        with pytest.raises(ConnectorConfigError):
            registry.register_spec(make_spec(primary_keys=[]))

    def test_load_invalid_yaml_spec_raises(self, registry):
        with pytest.raises(ConnectorConfigError):
            registry.load_spec_from_yaml(
                "connector_name: x\nprimary_keys: [id]\next_metadata_type: docId\n"
                "document_id_field: id\n"
            )


class TestListConnectors:
    def test_lists_files(self, registry):
        assert sorted(registry.list_connectors()) == ["broken", "manuals"]

    def test_uses_declared_names(self, tmp_path):
        (tmp_path / "personnel.yaml").write_text("connector_name: hr\nprimary_keys: [id]\n")
        registry = ConnectorRegistry(directory=str(tmp_path))
        assert registry.list_connectors() == ["hr"]
        assert registry.get_spec("hr").connector_name == "hr"

    def test_includes_registered(self, registry):
        registry.register_spec(make_spec(connector_name="adhoc"))
        assert "adhoc" in registry.list_connectors()
