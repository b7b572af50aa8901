"""Response comparison for one live/persisted operation pair.

Only runs for operations whose live side asked for response verification.
Responses are held to a stricter bar than requests: a shared $ref whose
schema is not known to match counts as a mismatch.
"""

import logging

from api_spec_sync.model.base import DiffStatus, MediaType, Operation, ProgressStatus, Response, Schema
from api_spec_sync.engine.shape import compare_body_schema

logger = logging.getLogger(__name__)

WILDCARD = "*/*"


def compare_and_mark_responses(live_op: Operation, persisted_op: Operation, match_table: dict[str, bool]) -> bool:
    """Compare responses and record the verdict on persisted_op.

    Status codes only the live side declares are copied onto persisted_op and
    are not a mismatch. Returns True when no mismatch was found.
    """
    if live_op is None or persisted_op is None:
        raise ValueError("compare_and_mark_responses needs both operations")

    live_responses = live_op.responses or {}
    if persisted_op.responses is None:
        persisted_op.responses = {}
    spec_responses = persisted_op.responses

    reasons = []
    for status, live_response in live_responses.items():
        if status not in spec_responses:
            spec_responses[status] = live_response.model_copy(deep=True) if live_response is not None else None
            logger.debug("Adopted response %s from live", status)
            continue
        reason = _compare_response(live_response, spec_responses[status], match_table)
        if reason:
            reasons.append(f"status {status}: {reason}")

    for status in spec_responses:
        if status not in live_responses:
            reasons.append(f"status {status}: documented but no longer produced")

    if reasons:
        persisted_op.progress = ProgressStatus.MOCK
        if persisted_op.diff == DiffStatus.NONE:
            persisted_op.diff = DiffStatus.RESPONSE
        elif persisted_op.diff == DiffStatus.REQUEST:
            persisted_op.diff = DiffStatus.BOTH
        persisted_op.res_log = "\n".join(reasons)
        return False

    if persisted_op.diff == DiffStatus.NONE:
        persisted_op.progress = ProgressStatus.COMPLETED
    persisted_op.res_log = None
    return True


def _compare_response(live: Response | None, persisted: Response | None, match_table: dict[str, bool]) -> str | None:
    live_content = (live.content if live is not None else None) or {}
    spec_content = (persisted.content if persisted is not None else None) or {}

    if not live_content and spec_content:
        return "content is documented but no longer produced"

    for content_type, media in live_content.items():
        if content_type == WILDCARD:
            continue
        spec_media = spec_content.get(content_type)
        if spec_media is None and content_type not in spec_content:
            spec_media = spec_content.get(WILDCARD)
            if spec_media is None and WILDCARD not in spec_content:
                return f"content '{content_type}' is not documented"
        reason = compare_body_schema(_schema_of(media), _schema_of(spec_media), match_table, unknown_ref_matches=False)
        if reason:
            return f"content '{content_type}': {reason}"
    return None


def _schema_of(media: MediaType | None) -> Schema | None:
    return media.schema_ if media is not None else None

