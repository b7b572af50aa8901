"""Status summaries over a reconciled specification."""

from collections import Counter

from pydantic import BaseModel

from api_spec_sync.model.base import ApiSpecification, DiffStatus, HttpMethod, ProgressStatus


class OperationStatus(BaseModel):
    """One row of a status listing."""

    method: HttpMethod
    path: str
    identifier: str | None
    diff: DiffStatus
    progress: ProgressStatus
    tag: str


class SyncSummary(BaseModel):
    total: int = 0
    diff: dict[DiffStatus, int] = {}
    progress: dict[ProgressStatus, int] = {}


def operation_statuses(spec: ApiSpecification) -> list[OperationStatus]:
    return [
        OperationStatus(
            method=method,
            path=path,
            identifier=op.identifier,
            diff=op.diff,
            progress=op.progress,
            tag=op.tag,
        )
        for path, method, op in spec.iter_operations()
    ]


def summarize(spec: ApiSpecification) -> SyncSummary:
    rows = operation_statuses(spec)
    return SyncSummary(
        total=len(rows),
        diff=dict(Counter(r.diff for r in rows)),
        progress=dict(Counter(r.progress for r in rows)),
    )
