"""Search, filter and pagination for the list endpoints.

Every list is ordered by descending id, so the newest rows come first
and a page never shifts between requests unless rows are added or
removed.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from errors import DatastoreError
from logging_config import get_logger
from models import Company, Prospect

logger = get_logger(__name__)

PAGE_SIZE = 20


@dataclass
class Page:
    items: List[Any]
    page: int
    total: int
    page_size: int = PAGE_SIZE

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size)

    def pagination(self) -> dict:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "total": self.total,
            "totalPages": self.total_pages,
        }


def parse_page(raw: Optional[str]) -> int:
    """1-based page number; anything unparseable or below 1 means page 1."""
    try:
        page = int(raw) if raw is not None else 1
    except (TypeError, ValueError):
        return 1
    return max(page, 1)


def paginate(query: Query, page: int, page_size: int = PAGE_SIZE) -> Page:
    """Count the filtered rows, then fetch the window for ``page``.

    A page past the end is empty without querying, so an oversized page
    number never reaches the driver as an offset.
    """
    offset = (page - 1) * page_size
    try:
        total = query.order_by(None).count()
        items = query.offset(offset).limit(page_size).all() if offset < total else []
    except SQLAlchemyError as e:
        logger.error("List query failed", extra={"context": {"error": str(e)}})
        raise DatastoreError(str(getattr(e, "orig", None) or e))
    return Page(items=items, page=page, total=total, page_size=page_size)


def _search(query: Query, search: Optional[str], *columns) -> Query:
    search = (search or "").strip()
    if not search:
        return query
    return query.filter(or_(*(c.icontains(search, autoescape=True) for c in columns)))


def list_companies(
    db: Session,
    page: int = 1,
    search: Optional[str] = None,
    industry: Optional[str] = None,
    status: Optional[str] = None,
) -> Page:
    query = db.query(Company)
    query = _search(query, search, Company.company_name, Company.client_name)

    if industry:
        query = query.filter(Company.industry == industry)
    if status:
        query = query.filter(Company.status == status)

    return paginate(query.order_by(Company.id.desc()), page)


def list_prospects(
    db: Session,
    page: int = 1,
    search: Optional[str] = None,
    industry: Optional[str] = None,
    call_status: Optional[str] = None,
    prospect_status: Optional[str] = None,
    created_on: Optional[date] = None,
) -> Page:
    query = db.query(Prospect)
    query = _search(query, search, Prospect.company_name, Prospect.contact_person)

    if industry:
        # Stored lowercase
        query = query.filter(func.lower(Prospect.industry) == industry.strip().lower())
    if call_status:
        query = query.filter(Prospect.call_status == call_status)
    if prospect_status:
        query = query.filter(Prospect.prospect_status == prospect_status)
    if created_on:
        start = datetime.combine(created_on, time.min, tzinfo=timezone.utc)
        query = query.filter(
            Prospect.created_at >= start,
            Prospect.created_at < start + timedelta(days=1),
        )

    return paginate(query.order_by(Prospect.id.desc()), page)
