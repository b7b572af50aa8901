"""Request comparison for one live/persisted operation pair.

Path parameters are matched by name, query parameters only by the multiset
of their types (renaming a query parameter is not a breaking change), and
request bodies per content type.
"""

from collections import Counter

from api_spec_sync.model.base import DiffStatus, Operation, Parameter, ProgressStatus, RequestBody, Schema
from api_spec_sync.engine.shape import compare_body_schema

UNKNOWN_TYPE = "unknown"


def type_identifier(schema: Schema | None) -> str:
    """Referenced schema name for a $ref, else the primitive type (format ignored)."""
    if schema is None:
        return UNKNOWN_TYPE
    if schema.is_ref:
        return schema.ref_name or UNKNOWN_TYPE
    return schema.type or UNKNOWN_TYPE


def compare_and_mark_request(live_op: Operation, persisted_op: Operation, match_table: dict[str, bool]) -> bool:
    """Compare request definitions and record the verdict on persisted_op.

    Returns True when the requests match.
    """
    if live_op is None or persisted_op is None:
        raise ValueError("compare_and_mark_request needs both operations")

    reason = (
        _compare_path_params(live_op.parameters, persisted_op.parameters)
        or _compare_query_params(live_op.parameters, persisted_op.parameters)
        or _compare_request_body(live_op.request_body, persisted_op.request_body, match_table)
    )

    if reason:
        persisted_op.diff = DiffStatus.REQUEST
        persisted_op.progress = ProgressStatus.MOCK
        persisted_op.req_log = reason
        return False

    persisted_op.diff = DiffStatus.NONE
    persisted_op.progress = ProgressStatus.COMPLETED
    persisted_op.req_log = None
    return True


def _filter_by_location(params: list[Parameter] | None, location: str) -> list[Parameter]:
    return [p for p in params or [] if p is not None and (p.location or "").lower() == location]


def _compare_path_params(live: list[Parameter] | None, persisted: list[Parameter] | None) -> str | None:
    live_params = _filter_by_location(live, "path")
    persisted_params = _filter_by_location(persisted, "path")

    if not live_params:
        return None
    if len(live_params) != len(persisted_params):
        return f"path parameter count differs (live={len(live_params)}, spec={len(persisted_params)})"

    live_by_name = {p.name.lower(): p for p in live_params}
    persisted_by_name = {p.name.lower(): p for p in persisted_params}
    if live_by_name.keys() != persisted_by_name.keys():
        return (
            f"path parameter names differ (live={sorted(live_by_name)}, "
            f"spec={sorted(persisted_by_name)})"
        )

    for name, param in live_by_name.items():
        live_type = type_identifier(param.schema_)
        spec_type = type_identifier(persisted_by_name[name].schema_)
        if live_type != spec_type:
            return f"path parameter '{name}' type differs (live={live_type}, spec={spec_type})"
    return None


def _compare_query_params(live: list[Parameter] | None, persisted: list[Parameter] | None) -> str | None:
    live_params = _filter_by_location(live, "query")
    persisted_params = _filter_by_location(persisted, "query")

    if not live_params:
        return None
    if len(live_params) != len(persisted_params):
        return f"query parameter count differs (live={len(live_params)}, spec={len(persisted_params)})"

    live_types = Counter(type_identifier(p.schema_) for p in live_params)
    spec_types = Counter(type_identifier(p.schema_) for p in persisted_params)
    if live_types != spec_types:
        return f"query parameter types differ (live={dict(sorted(live_types.items()))}, spec={dict(sorted(spec_types.items()))})"
    return None


def _compare_request_body(
    live: RequestBody | None, persisted: RequestBody | None, match_table: dict[str, bool]
) -> str | None:
    if live is None and persisted is None:
        return None
    if live is None:
        return "request body is documented but no longer accepted"
    if persisted is None:
        return "request body is accepted but not documented"

    live_content = live.content or {}
    spec_content = persisted.content or {}
    if live_content.keys() != spec_content.keys():
        return f"request content types differ (live={sorted(live_content)}, spec={sorted(spec_content)})"

    for content_type, media in live_content.items():
        live_schema = media.schema_ if media is not None else None
        spec_media = spec_content[content_type]
        spec_schema = spec_media.schema_ if spec_media is not None else None
        reason = compare_body_schema(live_schema, spec_schema, match_table, unknown_ref_matches=True)
        if reason:
            return f"content '{content_type}': {reason}"
    return None

