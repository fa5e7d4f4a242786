"""Download blueprint endpoints: read for any signed-in user, write for admins."""

import logging
from collections import defaultdict
from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_session, require_admin
from app.core.database import count_users, get_db
from app.core.errors import NotFoundError
from app.models import Download, DownloadCommand
from app.models.base import utcnow
from app.schemas.auth import AuthSession
from app.schemas.common import SuccessResponse
from app.schemas.downloads import (
    DownloadCommandOut,
    DownloadCreate,
    DownloadDetail,
    DownloadResponse,
    DownloadsListResponse,
    DownloadStats,
    DownloadStatsResponse,
    DownloadSummary,
    DownloadUpdate,
    RecentDownload,
    RecentDownloadsResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()

RECENT_LIMIT = 5


def _get_download_or_404(db: Session, download_id: str) -> Download:
    row = db.get(Download, download_id)
    if row is None:
        raise NotFoundError("Download not found")
    return row


def _commands_for(db: Session, download_id: str) -> Sequence[DownloadCommand]:
    return db.scalars(
        select(DownloadCommand)
        .where(DownloadCommand.download_id == download_id)
        .order_by(DownloadCommand.sort_order, DownloadCommand.created_at)
    ).all()


def _insert_commands(db: Session, download_id: str, commands: list[str]) -> None:
    """sort_order is the position in the submitted list."""
    db.add_all(
        DownloadCommand(download_id=download_id, command=cmd, sort_order=index)
        for index, cmd in enumerate(commands)
    )


def _detail(db: Session, row: Download) -> DownloadResponse:
    commands = [DownloadCommandOut.model_validate(c) for c in _commands_for(db, row.id)]
    detail = DownloadDetail.model_validate(row).model_copy(update={"commands": commands})
    return DownloadResponse(download=detail)


def _count(db: Session, *where: object) -> int:
    stmt = select(func.count()).select_from(Download)
    if where:
        stmt = stmt.where(*where)
    return db.scalar(stmt) or 0


@router.get("", response_model=DownloadsListResponse)
def list_downloads(
    _user: Annotated[AuthSession, Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
) -> DownloadsListResponse:
    """All blueprints, newest first, each with its ordered commands (one batched query)."""
    rows = db.scalars(select(Download).order_by(Download.created_at.desc())).all()
    if not rows:
        return DownloadsListResponse(downloads=[])

    commands_by_download: dict[str, list[DownloadCommandOut]] = defaultdict(list)
    commands = db.scalars(
        select(DownloadCommand)
        .where(DownloadCommand.download_id.in_([r.id for r in rows]))
        .order_by(DownloadCommand.sort_order, DownloadCommand.created_at)
    ).all()
    for cmd in commands:
        commands_by_download[cmd.download_id].append(DownloadCommandOut.model_validate(cmd))

    return DownloadsListResponse(
        downloads=[
            DownloadSummary.model_validate(r).model_copy(
                update={"commands": commands_by_download.get(r.id, [])}
            )
            for r in rows
        ]
    )


@router.get("/stats", response_model=DownloadStatsResponse)
def get_download_stats(
    _user: Annotated[AuthSession, Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
) -> DownloadStatsResponse:
    """Dashboard counters."""
    return DownloadStatsResponse(
        stats=DownloadStats(
            total_downloads=_count(db),
            single_install=_count(db, Download.install_type == "single"),
            multi_install=_count(db, Download.install_type == "multi"),
            active_users=count_users(db),
        )
    )


@router.get("/recent", response_model=RecentDownloadsResponse)
def get_recent_downloads(
    _user: Annotated[AuthSession, Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
) -> RecentDownloadsResponse:
    """Five newest blueprints, condensed (no commands, no script content)."""
    rows = db.scalars(
        select(Download).order_by(Download.created_at.desc()).limit(RECENT_LIMIT)
    ).all()
    return RecentDownloadsResponse(downloads=[RecentDownload.model_validate(r) for r in rows])


@router.get("/{download_id}", response_model=DownloadResponse)
def get_download(
    download_id: str,
    _user: Annotated[AuthSession, Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
) -> DownloadResponse:
    return _detail(db, _get_download_or_404(db, download_id))


@router.post("", response_model=DownloadResponse, status_code=status.HTTP_201_CREATED)
def create_download(
    body: DownloadCreate,
    admin: Annotated[AuthSession, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> DownloadResponse:
    """Create a blueprint owned by the caller, then its commands in submitted order."""
    fields = body.model_dump(exclude={"commands"})
    row = Download(**fields, created_by_id=admin.user.id)
    db.add(row)
    db.flush()
    _insert_commands(db, row.id, body.commands)
    db.commit()
    db.refresh(row)
    logger.info(
        "Download created",
        extra={"download_id": row.id, "provider": row.provider, "command_count": len(body.commands)},
    )
    return _detail(db, row)


@router.put("/{download_id}", response_model=DownloadResponse)
def update_download(
    download_id: str,
    body: DownloadUpdate,
    _admin: Annotated[AuthSession, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> DownloadResponse:
    """
    Partial update. Only fields present in the body are written.

    A present `commands` list fully replaces the stored commands
    (sort_order 0..n-1); an empty list removes them all.
    """
    row = _get_download_or_404(db, download_id)
    changes = body.model_dump(exclude_unset=True)
    commands = changes.pop("commands", None)

    for field, value in changes.items():
        setattr(row, field, value)
    row.updated_at = utcnow()

    if commands is not None:
        db.execute(delete(DownloadCommand).where(DownloadCommand.download_id == download_id))
        _insert_commands(db, download_id, commands)

    db.commit()
    db.refresh(row)
    return _detail(db, row)


@router.delete("/{download_id}", response_model=SuccessResponse)
def delete_download(
    download_id: str,
    _admin: Annotated[AuthSession, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> SuccessResponse:
    """Delete a blueprint and its commands."""
    _get_download_or_404(db, download_id)
    db.execute(delete(DownloadCommand).where(DownloadCommand.download_id == download_id))
    db.execute(delete(Download).where(Download.id == download_id))
    db.commit()
    logger.info("Download deleted", extra={"download_id": download_id})
    return SuccessResponse(message="Download deleted successfully")
