from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dailytasks.config import settings
from dailytasks.db import get_db
from dailytasks.domain import CompletionSnapshot, OccurrenceCell, OccurrenceStatus
from dailytasks.models.user import User
from dailytasks.schemas.occurrence import (
    AllUsersOccurrencesOut,
    MonthReportOut,
    OccurrenceCellOut,
    OccurrenceOut,
    OccurrenceRangeOut,
    OccurrenceStatusOut,
    TemplateSummaryOut,
    UserOccurrenceOut,
)
from dailytasks.services.calendar_dates import today_in
from dailytasks.services.errors import MalformedRecurrenceError
from dailytasks.services.occurrence_service import OccurrenceResolver


router = APIRouter()


def _status_out(s: OccurrenceStatus) -> OccurrenceStatusOut:
    return OccurrenceStatusOut(state=s.state, hours_late=s.hours_late)


def _completion_fields(completion: CompletionSnapshot | None) -> dict:
    if completion is None:
        return {}
    return {"completed_at": completion.completed_at, "remarks": completion.remarks}


def _cell_out(cell: OccurrenceCell) -> OccurrenceCellOut:
    return OccurrenceCellOut(
        template_id=cell.template_id,
        for_date=cell.for_date,
        status=_status_out(cell.status),
        **_completion_fields(cell.completion),
    )


def get_resolver(db: AsyncSession = Depends(get_db)) -> OccurrenceResolver:
    return OccurrenceResolver.for_session(db, settings.REPORT_TIMEZONE)


@router.get("/all-users", response_model=AllUsersOccurrencesOut)
async def all_users_occurrences(
    for_date: date | None = None,
    template_id: uuid.UUID | None = None,
    db: AsyncSession = Depends(get_db),
    resolver: OccurrenceResolver = Depends(get_resolver),
) -> AllUsersOccurrencesOut:
    today = today_in(settings.REPORT_TIMEZONE)
    target = for_date or today
    try:
        cells = await resolver.resolve_all_users(template_id, target, today)
    except MalformedRecurrenceError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    user_ids = list(dict.fromkeys(cell.user_id for cell in cells))
    names: dict[uuid.UUID, str] = {}
    if user_ids:
        rows = (await db.execute(select(User.id, User.full_name).where(User.id.in_(user_ids)))).all()
        names = {uid: full_name for uid, full_name in rows}

    return AllUsersOccurrencesOut(
        for_date=target,
        today=today,
        rows=[
            UserOccurrenceOut(
                template_id=cell.template_id,
                user_id=cell.user_id,
                user_full_name=names.get(cell.user_id),
                status=_status_out(cell.status),
                **_completion_fields(cell.completion),
            )
            for cell in cells
        ],
    )


@router.get("/users/{user_id}", response_model=OccurrenceRangeOut)
async def user_occurrences(
    user_id: uuid.UUID,
    from_date: date,
    to_date: date,
    resolver: OccurrenceResolver = Depends(get_resolver),
) -> OccurrenceRangeOut:
    today = today_in(settings.REPORT_TIMEZONE)
    cells = await resolver.resolve_range(user_id, from_date, to_date, today)
    return OccurrenceRangeOut(
        user_id=user_id,
        from_date=from_date,
        to_date=to_date,
        today=today,
        cells=[_cell_out(cell) for cell in cells],
    )


@router.get("/users/{user_id}/month", response_model=MonthReportOut)
async def user_month_report(
    user_id: uuid.UUID,
    month: str = Query(..., pattern=r"^\d{4}-\d{2}$"),
    resolver: OccurrenceResolver = Depends(get_resolver),
) -> MonthReportOut:
    today = today_in(settings.REPORT_TIMEZONE)
    try:
        report = await resolver.resolve_month(user_id, month, today)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    summaries: list[TemplateSummaryOut] = []
    for t in report.templates:
        summary = report.summaries.get(t.id)
        if summary is None:
            continue
        summaries.append(
            TemplateSummaryOut(
                template_id=t.id,
                title=t.title,
                due=summary.due,
                completed=summary.completed,
                late=summary.late,
                pending=summary.pending,
                not_assigned=summary.not_assigned,
            )
        )
    return MonthReportOut(
        user_id=user_id,
        month=month,
        from_date=report.from_date,
        to_date=report.to_date,
        today=today,
        cells=[_cell_out(cell) for cell in report.cells],
        summaries=summaries,
    )


@router.get("/{template_id}/users/{user_id}", response_model=OccurrenceOut)
async def single_occurrence(
    template_id: uuid.UUID,
    user_id: uuid.UUID,
    for_date: date | None = None,
    resolver: OccurrenceResolver = Depends(get_resolver),
) -> OccurrenceOut:
    today = today_in(settings.REPORT_TIMEZONE)
    target = for_date or today
    try:
        result = await resolver.resolve_one(template_id, user_id, target, today)
    except MalformedRecurrenceError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return OccurrenceOut(template_id=template_id, user_id=user_id, for_date=target, status=_status_out(result))
