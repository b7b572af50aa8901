"""Schema match table: which named schemas are structurally unchanged.

The table is built once per sync pass and then only read. References are
compared by name and never followed. Every referenced name has its own
entry in the table, so a schema that points at itself (or at a cycle of
other schemas) is still checked exactly once and recursion depth stays
bounded by the nesting of a single schema body.
"""

import logging

from api_spec_sync.model.base import Schema

logger = logging.getLogger(__name__)


def match_schemas(
    live_schemas: dict[str, Schema] | None,
    persisted_schemas: dict[str, Schema] | None,
) -> dict[str, bool]:
    """Build the name -> matched table over the union of both registries."""
    live_schemas = live_schemas or {}
    persisted_schemas = persisted_schemas or {}

    table: dict[str, bool] = {}
    for name, live_schema in live_schemas.items():
        if name not in persisted_schemas:
            logger.debug("Schema %s is missing from the persisted registry", name)
            table[name] = False
            continue
        table[name] = schemas_equal(live_schema, persisted_schemas[name])
        if not table[name]:
            logger.debug("Schema %s differs", name)

    # documented but no longer produced
    for name in persisted_schemas:
        if name not in live_schemas:
            table[name] = False

    return table


def schemas_equal(a: Schema | None, b: Schema | None) -> bool:
    if a is None or b is None:
        return a is None and b is None

    if a.is_ref or b.is_ref:
        return a.is_ref and b.is_ref and a.ref_name == b.ref_name

    if a.type != b.type or a.format != b.format:
        return False

    a_props = a.properties or {}
    b_props = b.properties or {}
    if a_props.keys() != b_props.keys():
        return False
    for prop, prop_schema in a_props.items():
        if not schemas_equal(prop_schema, b_props[prop]):
            return False

    if (a.items is None) != (b.items is None):
        return False
    if a.items is not None and not schemas_equal(a.items, b.items):
        return False

    if set(a.required or []) != set(b.required or []):
        return False

    return _additional_properties_equal(a.additional_properties, b.additional_properties)


def _additional_properties_equal(a: bool | Schema | None, b: bool | Schema | None) -> bool:
    if isinstance(a, Schema) and isinstance(b, Schema):
        return schemas_equal(a, b)
    if isinstance(a, Schema) or isinstance(b, Schema):
        return False
    return a == b
