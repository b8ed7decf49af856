# Lookup Tables MCP Server
# File: schema.py
# Version: v1

"""Parse the OData/EDMX $metadata document into table definitions."""

from __future__ import annotations

import logging
import uuid
import xml.etree.ElementTree as ET
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Union

from .errors import SchemaParseError
from .models import Entity, Property

logger = logging.getLogger(__name__)

# EDM primitive type name (last dotted segment) -> Python type.
EDM_PRIMITIVE_TYPES: Dict[str, type] = {
    "String": str,
    "Boolean": bool,
    "Byte": int,
    "SByte": int,
    "Int16": int,
    "Int32": int,
    "Int64": int,
    "Single": float,
    "Double": float,
    "Decimal": Decimal,
    "DateTimeOffset": datetime,
    "Date": date,
    "TimeOfDay": time,
    "Duration": timedelta,
    "Guid": uuid.UUID,
    "Binary": bytes,
}

EdmDocument = Union[str, bytes, ET.ElementTree, ET.Element]


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def resolve_system_type(type_name: Optional[str]) -> Optional[type]:
    """Map ``Edm.Int32`` style names to Python types; None if unknown."""
    if not type_name:
        return None
    return EDM_PRIMITIVE_TYPES.get(type_name.rsplit(".", 1)[-1])


def _parse_nullable(raw: Optional[str]) -> Optional[bool]:
    if raw is None:
        return None
    return raw != "false"


def _to_root(edm_xml: EdmDocument) -> ET.Element:
    if isinstance(edm_xml, ET.ElementTree):
        return edm_xml.getroot()
    if isinstance(edm_xml, ET.Element):
        return edm_xml
    try:
        return ET.fromstring(edm_xml)
    except ET.ParseError as exc:
        raise SchemaParseError(f"Invalid EDM metadata document: {exc}") from exc


def _parse_entity(entity_type: ET.Element) -> Entity:
    name = entity_type.get("Name")
    if not name:
        raise ValueError("EntityType without a Name attribute")

    key_name: Optional[str] = None
    for elem in entity_type.iter():
        if _local_name(elem.tag) == "PropertyRef":
            key_name = elem.get("Name")
            break

    properties: List[Property] = []
    for child in entity_type:
        if _local_name(child.tag) != "Property":
            continue
        prop_name = child.get("Name")
        if not prop_name:
            raise ValueError(f"Property without a Name attribute in '{name}'")
        type_name = child.get("Type")
        properties.append(
            Property(
                name=prop_name,
                system_type=resolve_system_type(type_name),
                nullable=_parse_nullable(child.get("Nullable")),
                type_name=type_name,
            )
        )

    return Entity(name=name, key_name=key_name, properties=tuple(properties))


def parse_schema(edm_xml: EdmDocument) -> Dict[str, Entity]:
    """Return a mapping of table name -> Entity.

    Only the first ``Schema`` element is read. Entity types that cannot be
    interpreted are skipped so one bad table does not hide the others.
    """
    root = _to_root(edm_xml)

    schema: Optional[ET.Element] = None
    for elem in root.iter():
        if _local_name(elem.tag) == "Schema":
            schema = elem
            break

    if schema is None:
        raise SchemaParseError("EDM metadata document does not contain a Schema element.")

    entities: Dict[str, Entity] = {}
    for elem in schema.iter():
        if _local_name(elem.tag) != "EntityType":
            continue
        try:
            entity = _parse_entity(elem)
        except ValueError as exc:
            logger.warning("Skipping malformed entity type: %s", exc)
            continue
        entities[entity.name] = entity

    logger.debug("Parsed %d entity types from EDM metadata", len(entities))
    return entities
