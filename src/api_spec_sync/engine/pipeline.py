"""Reconciliation pipeline: persisted + live -> updated persisted specification.

The pipeline never mutates its inputs. It works on deep copies and returns a
new ApiSpecification, so a host can publish the result only once the whole
pass has completed.

Per (path, method) the outcome is one of:

- new path or new method on a known path: adopted from live, diff=endpoint
- persisted operation already at diff=endpoint: left as is until a reviewer
  clears it
- live operation explicitly mocked: mock marker and tag copied, no comparison
- otherwise: request comparison, then response comparison when the live
  operation asked for it
- persisted operation with no live counterpart: diff=endpoint (stale)
"""

import logging

from api_spec_sync.config import SyncConfig
from api_spec_sync.engine.endpoint import adopt_operation, copy_referenced_schemas, mark_stale
from api_spec_sync.engine.report import summarize
from api_spec_sync.engine.request_diff import compare_and_mark_request
from api_spec_sync.engine.response_diff import compare_and_mark_responses
from api_spec_sync.engine.schema_match import match_schemas
from api_spec_sync.model.base import (
    ApiSpecification,
    Components,
    DiffStatus,
    HttpMethod,
    PathItem,
    ProgressStatus,
    Schema,
)

logger = logging.getLogger(__name__)


def reconcile(
    persisted: ApiSpecification | None,
    live: ApiSpecification,
    config: SyncConfig | None = None,
) -> ApiSpecification:
    """Synchronize the persisted specification with the live one."""
    if live is None:
        raise ValueError("reconcile needs a live specification")
    config = config or SyncConfig()
    live = live.model_copy(deep=True)

    if persisted is None:
        result = _bootstrap(live, config)
        logger.info("No persisted specification, adopted %d live operations", summarize(result).total)
        return result

    result = persisted.model_copy(deep=True)
    live_schemas = live.schema_registry()
    match_table = match_schemas(live_schemas, result.schema_registry())

    if result.paths is None:
        result.paths = {}
    live_paths = live.paths or {}

    for url, live_item in live_paths.items():
        if live_item is None:
            continue
        spec_item = result.paths.get(url)
        if spec_item is None:
            _adopt_path(result, url, live_item, live_schemas, config)
            continue
        for method in HttpMethod:
            _reconcile_method(result, url, method, spec_item, live_item, live_schemas, match_table, config)

    for url, spec_item in result.paths.items():
        if live_paths.get(url) is None and spec_item is not None:
            for method, op in spec_item.operations():
                if op.diff != DiffStatus.ENDPOINT:
                    logger.info("%s %s is no longer served", method.value, url)
                mark_stale(op)

    result.paths = {url: item for url, item in result.paths.items() if item is not None and not item.is_empty()}
    _merge_security_schemes(result, live)

    summary = summarize(result)
    logger.info(
        "Reconciled %d operations: %d completed, %d mock, %d awaiting endpoint review",
        summary.total,
        summary.progress.get(ProgressStatus.COMPLETED, 0),
        summary.progress.get(ProgressStatus.MOCK, 0),
        summary.diff.get(DiffStatus.ENDPOINT, 0),
    )
    return result


def _bootstrap(live: ApiSpecification, config: SyncConfig) -> ApiSpecification:
    if live.paths is None:
        live.paths = {}
    for _, _, op in live.iter_operations():
        adopt_operation(op, config)
    return live


def _adopt_path(
    result: ApiSpecification,
    url: str,
    live_item: PathItem,
    live_schemas: dict[str, Schema],
    config: SyncConfig,
) -> None:
    logger.info("New path %s", url)
    for _, op in live_item.operations():
        adopt_operation(op, config)
        copy_referenced_schemas(result, live_schemas, operation=op)
    result.paths[url] = live_item


def _reconcile_method(
    result: ApiSpecification,
    url: str,
    method: HttpMethod,
    spec_item: PathItem,
    live_item: PathItem,
    live_schemas: dict[str, Schema],
    match_table: dict[str, bool],
    config: SyncConfig,
) -> None:
    live_op = live_item.operation(method)
    spec_op = spec_item.operation(method)

    if live_op is None:
        if spec_op is not None:
            if spec_op.diff != DiffStatus.ENDPOINT:
                logger.info("%s %s is no longer served", method.value, url)
            mark_stale(spec_op)
        return

    if spec_op is None:
        logger.info("New endpoint %s %s", method.value, url)
        spec_item.set_operation(method, adopt_operation(live_op, config))
        copy_referenced_schemas(result, live_schemas, operation=live_op)
        return

    if spec_op.diff == DiffStatus.ENDPOINT:
        return

    if live_op.mock:
        spec_op.mock = True
        spec_op.progress = ProgressStatus.MOCK
        spec_op.tag = live_op.tag
        logger.debug("%s %s is mocked (tag=%s)", method.value, url, live_op.tag)
        return

    if spec_op.mock:
        # implemented since the last pass
        spec_op.mock = None
        spec_op.tag = config.default_tag

    if not compare_and_mark_request(live_op, spec_op, match_table):
        logger.debug("%s %s request differs: %s", method.value, url, spec_op.req_log)

    if config.verify_all_responses or live_op.verify_responses:
        known = set(spec_op.responses or {})
        if not compare_and_mark_responses(live_op, spec_op, match_table):
            logger.debug("%s %s response differs: %s", method.value, url, spec_op.res_log)
        added = [resp for code, resp in (spec_op.responses or {}).items() if code not in known]
        if added:
            copy_referenced_schemas(result, live_schemas, responses=added)
    else:
        spec_op.res_log = None


def _merge_security_schemes(result: ApiSpecification, live: ApiSpecification) -> None:
    """Keep persisted security schemes, adding live ones it does not know yet."""
    live_schemes = live.components.security_schemes if live.components is not None else None
    if not live_schemes:
        return
    if result.components is None:
        result.components = Components()
    merged = dict(result.components.security_schemes or {})
    for name, scheme in live_schemes.items():
        merged.setdefault(name, scheme)
    result.components.security_schemes = merged
