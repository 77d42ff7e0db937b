from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.deps import get_current_user
from core import analytics_service
from core.auth_service import require_role
from core.db import get_db
from core.utils import default_date_range, parse_date_range

router = APIRouter(tags=["reports"])


def _range_or_default(start, end):
    return parse_date_range(start, end, required=False) or default_date_range()


@router.get("/reports/stats")
def stats(start: Optional[str] = None, end: Optional[str] = None,
          user=Depends(get_current_user), db: Session = Depends(get_db)):
    require_role(user, "admin")
    start_at, end_at = parse_date_range(start, end, required=True)
    return analytics_service.get_dashboard_summary(db, user, start_at, end_at)


@router.get("/reports/category-analysis")
def category_analysis(start: Optional[str] = None, end: Optional[str] = None,
                      user=Depends(get_current_user), db: Session = Depends(get_db)):
    require_role(user, "admin")
    start_at, end_at = _range_or_default(start, end)
    return analytics_service.get_category_report(db, user, start_at, end_at)


@router.get("/reports/user-analysis")
def user_analysis(start: Optional[str] = None, end: Optional[str] = None,
                  user=Depends(get_current_user), db: Session = Depends(get_db)):
    require_role(user, "admin")
    start_at, end_at = _range_or_default(start, end)
    return analytics_service.get_user_report(db, user, start_at, end_at)


@router.get("/analytics/popular-items")
def popular_items(limit: int = Query(10, ge=1, le=100), user=Depends(get_current_user),
                  db: Session = Depends(get_db)):
    return analytics_service.popular_items_all_time(db, user, limit=limit)
