"""Connector Registry — loads connector specs and keeps their selected builders.

Each connector's content strategy is selected once, the first time the
connector is requested, and reused for the life of the process.
"""

from typing import Optional

from dbfeed.core.builder_selection import BuilderSelection, select_document_builder
from dbfeed.core.connector_spec import ConnectorSpec
from dbfeed.core.document_builder import TraversalContext
from dbfeed.core.exceptions import ConnectorConfigError
from dbfeed.core.models import ExtMetadataType
from dbfeed.core.spec_loader import connectors_dir, list_specs, load_spec, parse_spec


class ConnectorRegistry:
    """Registry that loads, validates, and caches connector specs and builders."""

    def __init__(
        self,
        directory: Optional[str] = None,
        traversal_context: Optional[TraversalContext] = None,
    ):
        self._specs: dict[str, ConnectorSpec] = {}
        self._selections: dict[str, BuilderSelection] = {}
        self._dir = connectors_dir(directory)
        self._traversal_context = traversal_context or TraversalContext()

    def _check(self, spec: ConnectorSpec) -> ConnectorSpec:
        errors = self.validate_spec(spec)
        if errors:
            raise ConnectorConfigError(
                f"Connector validation errors for {spec.connector_name}: {errors}",
                errors=errors,
            )
        return spec

    def load_spec_from_yaml(self, yaml_content: str) -> ConnectorSpec:
        """Parse and validate a connector spec from a YAML string."""
        return self._check(parse_spec(yaml_content))

    def load_spec(self, connector_name: str) -> ConnectorSpec:
        """Load a connector from disk, validate it and cache it."""
        spec = self._check(load_spec(connector_name, self._dir))
        self._specs[connector_name] = spec
        return spec

    def get_spec(self, connector_name: str) -> ConnectorSpec:
        """Get cached spec or load it from disk."""
        if connector_name not in self._specs:
            return self.load_spec(connector_name)
        return self._specs[connector_name]

    def register_spec(self, spec: ConnectorSpec) -> None:
        """Register a spec directly, replacing any earlier selection."""
        self._specs[spec.connector_name] = self._check(spec)
        self._selections.pop(spec.connector_name, None)

    def get_selection(self, connector_name: str) -> BuilderSelection:
        """The connector's builder, selected on first use."""
        if connector_name not in self._selections:
            spec = self.get_spec(connector_name)
            self._selections[connector_name] = select_document_builder(
                spec, self._traversal_context
            )
        return self._selections[connector_name]

    def validate_spec(self, spec: ConnectorSpec) -> list[str]:
        """Validate spec integrity. Returns list of error messages (empty = valid)."""
        errors: list[str] = []

        if not spec.connector_name.strip():
            errors.append("connector_name must not be empty")
        if not spec.primary_keys:
            errors.append("primary_keys must name at least one column")

        lowered = [key.lower() for key in spec.primary_keys]
        if len(set(lowered)) != len(lowered):
            errors.append(f"primary_keys contains duplicates: {spec.primary_keys}")

        skipped = {column.lower() for column in spec.metadata_skip_columns()}
        for key in spec.primary_keys:
            if key.lower() in skipped:
                errors.append(f"Primary key column '{key}' cannot also be skipped")

        mode = ExtMetadataType.parse(spec.ext_metadata_type)
        if mode == ExtMetadataType.DOC_ID and spec.document_id_field and not spec.base_url:
            errors.append("base_url is required when ext_metadata_type is 'docId'")

        # Missing mode fields are not errors: selection falls back to metadata mode
        return errors

    def list_connectors(self) -> list[str]:
        """List all available connector names from disk and registrations."""
        names = list(self._specs.keys())
        for name in list_specs(self._dir):
            if name not in names:
                names.append(name)
        return names
