"""Connector Spec Loader — loads and validates connector YAML files."""

import logging
from pathlib import Path
from typing import Iterator, Optional, Union

import yaml
from pydantic import ValidationError

from dbfeed.core.config import settings
from dbfeed.core.connector_spec import ConnectorSpec
from dbfeed.core.exceptions import ConnectorConfigError

logger = logging.getLogger(__name__)


def connectors_dir(path: Optional[Union[str, Path]] = None) -> Path:
    """Resolve the connectors directory, relative paths against the project root."""
    directory = Path(path or settings.connectors_dir)
    if not directory.is_absolute():
        directory = settings.project_root / directory
    return directory


def parse_spec(yaml_content: str) -> ConnectorSpec:
    """Parse a connector spec from a YAML string."""
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise ConnectorConfigError(f"Invalid connector YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConnectorConfigError("Invalid connector spec: expected a YAML mapping")

    try:
        return ConnectorSpec(**data)
    except ValidationError as e:
        raise ConnectorConfigError(
            f"Invalid connector spec: {e}",
            errors=[err["msg"] for err in e.errors()],
        ) from e


def _connector_files(directory: Path) -> Iterator[tuple[Path, str, dict]]:
    """Yield (path, text, raw mapping) for every readable connector file."""
    if not directory.exists():
        return
    for path in sorted(directory.glob("*.yaml")):
        content = path.read_text()
        try:
            raw = yaml.safe_load(content)
        except yaml.YAMLError:
            logger.warning(f"Ignoring unreadable connector file {path}")
            continue
        if isinstance(raw, dict) and raw.get("connector_name"):
            yield path, content, raw


def load_spec(connector_name: str, directory: Optional[Union[str, Path]] = None) -> ConnectorSpec:
    """Load the connector whose file declares the given connector_name.

    Files starting with an underscore are loadable but never listed.
    """
    specs_dir = connectors_dir(directory)
    for path, content, raw in _connector_files(specs_dir):
        if raw["connector_name"] == connector_name:
            spec = parse_spec(content)
            logger.info(f"Loaded connector '{connector_name}' from {path}")
            return spec

    raise FileNotFoundError(f"No connector file found for '{connector_name}' in {specs_dir}")


def list_specs(directory: Optional[Union[str, Path]] = None) -> list[str]:
    """List the connector names declared in the connectors directory."""
    names = []
    for path, _, raw in _connector_files(connectors_dir(directory)):
        if path.stem.startswith("_"):
            continue
        if raw["connector_name"] not in names:
            names.append(raw["connector_name"])
    return names
