from typing import Optional

from fastapi import APIRouter, Depends, Query

from paysheet.api.dependencies import get_components, get_current_user
from paysheet.api.responses import ok
from paysheet.orchestrator import AppComponents


# Every report needs a signed-in caller; the identity itself is unused.
router = APIRouter(
    prefix="/reports",
    tags=["reports"],
    dependencies=[Depends(get_current_user)],
)


@router.get("/balance")
def get_balance(components: AppComponents = Depends(get_components)):
    return ok(components.reports.balance().to_api())


@router.get("/today")
def get_today(components: AppComponents = Depends(get_components)):
    return ok(components.reports.report("today").to_api())


@router.get("/weekly")
def get_weekly(components: AppComponents = Depends(get_components)):
    return ok(components.reports.report("week").to_api())


@router.get("/monthly")
def get_monthly(
    month: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    components: AppComponents = Depends(get_components),
):
    report = components.reports.report("month", month=month, year=year)
    return ok(report.to_api())


@router.get("/range")
def get_range(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    components: AppComponents = Depends(get_components),
):
    report = components.reports.report("custom", start_date, end_date)
    return ok(report.to_api())


@router.get("/summary")
def get_summary(components: AppComponents = Depends(get_components)):
    return ok(components.reports.summary().to_api())
