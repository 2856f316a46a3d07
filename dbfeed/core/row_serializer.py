"""Row serialization — canonical text form of a row for content and checksums.

The serializer is pluggable: anything matching the RowSerializer protocol can
replace the default HTML rendering (e.g. an XSLT-driven one). Output must be
a pure function of its arguments, since checksums are computed over it.
"""

import html
from typing import Any, Collection, Mapping, Protocol, Sequence

from dbfeed.core.hashing import serialize_value


PAGE_TITLE = "Database Connector Result"


class RowSerializer(Protocol):
    def __call__(
        self,
        connector_name: str,
        row: Mapping[str, Any],
        primary_key: Sequence[str],
        exclude: Collection[str],
    ) -> str:
        ...


class HtmlRowSerializer:
    """Render a row as a small HTML page, one ``column=value`` cell per column."""

    def __call__(
        self,
        connector_name: str,
        row: Mapping[str, Any],
        primary_key: Sequence[str],
        exclude: Collection[str],
    ) -> str:
        cells = []
        for column, value in row.items():
            if column in exclude:
                continue
            text = serialize_value(value, column)
            css = ' class="pk"' if column in primary_key else ""
            cells.append(
                f"<tr><td{css}>{html.escape(column)}={html.escape(text)}</td></tr>"
            )

        return (
            "<html><head>"
            f"<title>{PAGE_TITLE}</title>"
            f'<meta name="connector" content="{html.escape(connector_name)}"/>'
            "</head><body>"
            f"<h1>{PAGE_TITLE}</h1>"
            f"<table>{''.join(cells)}</table>"
            "</body></html>"
        )


default_serializer = HtmlRowSerializer()
