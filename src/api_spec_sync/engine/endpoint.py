"""Endpoint-level transitions: adopting live operations and flagging stale ones."""

import logging
import uuid

from api_spec_sync.config import SyncConfig
from api_spec_sync.model.base import (
    ApiSpecification,
    Components,
    DiffStatus,
    Operation,
    ProgressStatus,
    Response,
    Schema,
)

logger = logging.getLogger(__name__)


def new_identifier() -> str:
    return str(uuid.uuid4())


def adopt_operation(operation: Operation, config: SyncConfig) -> Operation:
    """Mark a live operation as a new endpoint awaiting review.

    The identifier is only assigned when missing and is never replaced.
    """
    if not operation.identifier:
        operation.identifier = new_identifier()
    if config.uppercase_tags and operation.tags:
        operation.tags = [t.upper() if t is not None else t for t in operation.tags]
    operation.diff = DiffStatus.ENDPOINT
    operation.progress = ProgressStatus.NONE
    operation.tag = config.default_tag
    operation.req_log = None
    operation.res_log = None
    return operation


def mark_stale(operation: Operation) -> None:
    """Flag a persisted operation the live service no longer serves."""
    operation.diff = DiffStatus.ENDPOINT


def copy_referenced_schemas(
    target: ApiSpecification,
    source_schemas: dict[str, Schema],
    operation: Operation | None = None,
    responses: list[Response] | None = None,
) -> list[str]:
    """Copy every schema the given operation or responses reference into target.

    References are followed transitively through source_schemas. Names the
    target registry already holds are left untouched. Returns the names added.
    """
    roots: list[Schema | None] = []
    if operation is not None:
        roots.extend(_operation_schemas(operation))
    for response in responses or []:
        roots.extend(_response_schemas(response))

    names: set[str] = set()
    for schema in roots:
        _collect_refs(schema, source_schemas, names)
    if not names:
        return []

    if target.components is None:
        target.components = Components()
    if target.components.schemas is None:
        target.components.schemas = {}
    registry = target.components.schemas

    added = []
    for name in sorted(names):
        if name in registry or name not in source_schemas:
            continue
        registry[name] = source_schemas[name].model_copy(deep=True)
        added.append(name)
    if added:
        logger.debug("Copied schemas %s into the persisted registry", added)
    return added


def _operation_schemas(operation: Operation) -> list[Schema | None]:
    schemas = [p.schema_ for p in operation.parameters or [] if p is not None]
    if operation.request_body is not None:
        schemas.extend(m.schema_ for m in (operation.request_body.content or {}).values() if m is not None)
    for response in (operation.responses or {}).values():
        schemas.extend(_response_schemas(response))
    return schemas


def _response_schemas(response: Response | None) -> list[Schema | None]:
    if response is None:
        return []
    return [m.schema_ for m in (response.content or {}).values() if m is not None]


def _collect_refs(schema: Schema | None, registry: dict[str, Schema], found: set[str]) -> None:
    if schema is None:
        return
    if schema.is_ref:
        name = schema.ref_name
        if name and name not in found:
            found.add(name)
            _collect_refs(registry.get(name), registry, found)
        return
    for prop in (schema.properties or {}).values():
        _collect_refs(prop, registry, found)
    _collect_refs(schema.items, registry, found)
    if isinstance(schema.additional_properties, Schema):
        _collect_refs(schema.additional_properties, registry, found)
