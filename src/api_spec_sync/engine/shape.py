"""Body schema comparison shared by the request and response engines."""

from api_spec_sync.model.base import Schema


def compare_body_schema(
    live: Schema | None,
    persisted: Schema | None,
    match_table: dict[str, bool],
    unknown_ref_matches: bool,
) -> str | None:
    """Return a mismatch reason, or None when the two body schemas agree.

    References compare by name and then by their match-table entry; a name
    with no entry counts as matching only when unknown_ref_matches is set.
    Inline schemas compare their primitive type only, descending into
    array items so a list of $refs still reaches the match table.
    """
    if live is None and persisted is None:
        return None
    if live is None or persisted is None:
        return "schema is declared on one side only"

    if live.is_ref and persisted.is_ref:
        if live.ref_name != persisted.ref_name:
            return f"$ref differs (live={live.ref_name}, spec={persisted.ref_name})"
        if match_table.get(live.ref_name, unknown_ref_matches):
            return None
        return f"referenced schema '{live.ref_name}' differs"

    if live.is_ref or persisted.is_ref:
        return "one side uses a $ref and the other an inline schema"

    if (live.type or "") != (persisted.type or ""):
        return f"type differs (live={live.type}, spec={persisted.type})"

    if live.items is not None or persisted.items is not None:
        reason = compare_body_schema(live.items, persisted.items, match_table, unknown_ref_matches)
        if reason:
            return f"items: {reason}"

    return None
