"""Document value types produced by the builders.

ContentHolder carries what a strategy computed for one row; IndexDocument is
the deliverable document wrapped by a Handle.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Union

from dbfeed.core.lob import LobContent
from dbfeed.core.models import PROPNAME_CONTENT

Content = Union[str, LobContent, None]


@dataclass(frozen=True)
class ContentHolder:
    """Checksum of a row plus the content it will deliver, if any."""
    checksum: str
    content: Content = None
    mime_type: Optional[str] = None
    content_length: Optional[int] = None

    def close(self) -> None:
        if isinstance(self.content, LobContent):
            self.content.close()


@dataclass(frozen=True)
class IndexDocument:
    """A document ready for the indexing pipeline.

    The checksum is not a property: it is only reachable through the
    snapshot string returned by ``to_json``.
    """
    doc_id: str
    properties: Mapping[str, str]
    content: Content = None
    _snapshot_json: str = field(default="", repr=False)

    def __post_init__(self):
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def find_property(self, name: str) -> Optional[str]:
        if name == PROPNAME_CONTENT and isinstance(self.content, str):
            return self.content
        return self.properties.get(name)

    def get_property_names(self) -> list[str]:
        names = list(self.properties.keys())
        if isinstance(self.content, str):
            names.append(PROPNAME_CONTENT)
        return names

    @property
    def has_content(self) -> bool:
        return self.content is not None

    def to_json(self) -> str:
        return self._snapshot_json
