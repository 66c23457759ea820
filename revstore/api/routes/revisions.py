"""Strategy revision routes"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from ...core.config import get_settings
from ...core.dependencies import VersionManagerDep
from ...core.errors import (
    AppError,
    ErrorCode,
    revision_not_found_error,
    strategy_not_found_error,
)
from ...models.strategy import (
    Change,
    IntegrityReport,
    Revision,
    StrategySnapshot,
    StrategyStats,
)
from ...services.diff import describe_change, generate_diff, summarize_changes

router = APIRouter(prefix="/strategies", tags=["Revisions"])
diff_router = APIRouter(tags=["Diff"])
logger = logging.getLogger(__name__)


# ==================== Request/Response Models ====================

class RevisionCreate(BaseModel):
    """Save revision request"""
    data: StrategySnapshot
    change_description: Optional[str] = Field(default=None, max_length=1000)


class RevisionCreated(BaseModel):
    """Save revision response"""
    strategy_id: str
    revision_id: str
    stats: StrategyStats


class RestoreResponse(BaseModel):
    """Restore response: the snapshot the strategy now points at"""
    strategy_id: str
    revision_id: str
    data: StrategySnapshot


class DiffRequest(BaseModel):
    """Compare two posted snapshots"""
    old: StrategySnapshot
    new: StrategySnapshot


class DiffResponse(BaseModel):
    """Ordered changes plus per-type counts and display lines"""
    changes: list[Change]
    summary: dict[str, int]
    lines: list[str]


def _diff_response(changes: list[Change]) -> DiffResponse:
    return DiffResponse(
        changes=changes,
        summary=summarize_changes(changes),
        lines=[describe_change(c) for c in changes],
    )


# ==================== Routes ====================

@router.post(
    "/{strategy_id}/revisions",
    response_model=RevisionCreated,
    status_code=status.HTTP_201_CREATED,
)
async def save_revision(
    strategy_id: str,
    body: RevisionCreate,
    manager: VersionManagerDep,
):
    """Append a revision and make it the active one"""
    revision_id = await manager.save_revision(
        strategy_id, body.data, change_description=body.change_description
    )
    stats = await manager.get_strategy_stats(strategy_id)
    return RevisionCreated(strategy_id=strategy_id, revision_id=revision_id, stats=stats)


@router.get("/{strategy_id}/revisions", response_model=list[Revision])
async def list_revisions(
    strategy_id: str,
    manager: VersionManagerDep,
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
):
    """Revision history, newest first"""
    max_limit = get_settings().history_max_limit
    limit = min(limit, max_limit) if limit else max_limit
    return await manager.get_revision_history(strategy_id, limit=limit, offset=offset)


@router.get("/{strategy_id}/revisions/current", response_model=Revision)
async def get_current_revision(strategy_id: str, manager: VersionManagerDep):
    """The revision the strategy currently points at"""
    revision = await manager.get_current_revision(strategy_id)
    if revision is None:
        raise strategy_not_found_error(strategy_id)
    return revision


@router.get("/{strategy_id}/revisions/{revision_id}", response_model=Revision)
async def get_revision(
    strategy_id: str,
    revision_id: str,
    manager: VersionManagerDep,
):
    revision = await manager.get_revision(strategy_id, revision_id)
    if revision is None:
        raise revision_not_found_error(strategy_id, revision_id)
    return revision


@router.post(
    "/{strategy_id}/revisions/{revision_id}/restore",
    response_model=RestoreResponse,
)
async def restore_revision(
    strategy_id: str,
    revision_id: str,
    manager: VersionManagerDep,
):
    """Move the active pointer to an earlier revision (history is kept)"""
    data = await manager.restore_revision(strategy_id, revision_id)
    if data is None:
        raise revision_not_found_error(strategy_id, revision_id)
    return RestoreResponse(strategy_id=strategy_id, revision_id=revision_id, data=data)


@router.get("/{strategy_id}/diff", response_model=DiffResponse)
async def compare_revisions(
    strategy_id: str,
    manager: VersionManagerDep,
    from_revision: str = Query(..., min_length=1),
    to_revision: str = Query(..., min_length=1),
):
    """Diff two stored revisions of a strategy"""
    changes = await manager.compare_revisions(strategy_id, from_revision, to_revision)
    if changes is None:
        missing = [
            rid for rid in (from_revision, to_revision)
            if await manager.get_revision(strategy_id, rid) is None
        ]
        raise AppError(
            code=ErrorCode.REVISION_NOT_FOUND,
            message="Cannot compare: revision not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"strategy_id": strategy_id, "missing": missing},
        )
    return _diff_response(changes)


@router.get("/{strategy_id}/stats", response_model=StrategyStats)
async def get_strategy_stats(strategy_id: str, manager: VersionManagerDep):
    stats = await manager.get_strategy_stats(strategy_id)
    if stats is None:
        raise strategy_not_found_error(strategy_id)
    return stats


@router.get("/{strategy_id}/integrity", response_model=IntegrityReport)
async def verify_integrity(strategy_id: str, manager: VersionManagerDep):
    """Report pointer/log inconsistencies without repairing them"""
    return await manager.verify_integrity(strategy_id)


@router.delete("/{strategy_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_strategy(strategy_id: str, manager: VersionManagerDep):
    """Purge all revisions and the pointer. Idempotent."""
    await manager.delete_strategy(strategy_id)


@diff_router.post("/diff", response_model=DiffResponse)
async def diff_snapshots(body: DiffRequest):
    """Diff two snapshots supplied by the caller (no storage access)"""
    return _diff_response(generate_diff(body.old, body.new))
