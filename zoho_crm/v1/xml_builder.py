"""XML payloads for the V1 insert and update methods."""

from collections.abc import Iterable
from typing import Any

from lxml import etree

from ..core.entities import Entity


def build_records(module: str, records: Iterable[dict[str, Any] | Entity]) -> str:
    """
    Build the "xmlData" parameter value for a list of records.

    Each record becomes a numbered <row> with one <FL val="..."> element
    per attribute. The XML declaration is omitted, the API rejects it.

    Args:
        module: Name of the module (root element)
        records: Records as dictionaries or entities

    Returns:
        The XML document as a string
    """
    root = etree.Element(module)

    for row_number, record in enumerate(records, start=1):
        if isinstance(record, Entity):
            record = record.to_dict()

        row = etree.SubElement(root, "row", no=str(row_number))

        for name, value in record.items():
            # Stringify boolean values
            if isinstance(value, bool):
                value = "true" if value else "false"

            field = etree.SubElement(row, "FL", val=name)
            field.text = "" if value is None else str(value)

    return etree.tostring(root, encoding="unicode")
