"""Writes against the datastore: create, full-replace update, hard delete.

Each operation is its own transaction. Failures are rolled back and
re-raised as CrmError subclasses so the API layer never sees a raw
SQLAlchemy exception.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Type

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from database import Base
from errors import DatastoreError, DuplicateEntry, NotFound
from logging_config import get_logger
from models import Company, Prospect, utcnow
from validation import CALLED

logger = get_logger(__name__)

DUPLICATE_PROSPECT = "A prospect with this company name already exists"


def _datastore_message(exc: SQLAlchemyError) -> str:
    return str(getattr(exc, "orig", None) or exc)


def _is_prospect_name_conflict(exc: IntegrityError) -> bool:
    message = _datastore_message(exc).lower()
    return "uq_prospects_company_name_key" in message or (
        "unique" in message and "prospects" in message
    )


def _commit(db: Session, model: Type[Base], action: str, row_id: Optional[int] = None):
    context = {"table": model.__tablename__, "action": action, "id": row_id}
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if model is Prospect and _is_prospect_name_conflict(e):
            logger.info("Duplicate prospect rejected", extra={"context": context})
            raise DuplicateEntry(DUPLICATE_PROSPECT)
        logger.error("Integrity error", extra={"context": {**context, "error": str(e)}})
        raise DatastoreError(_datastore_message(e))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Datastore error", extra={"context": {**context, "error": str(e)}})
        raise DatastoreError(_datastore_message(e))


def _get(db: Session, model: Type[Base], row_id: int, label: str):
    try:
        row = db.get(model, row_id)
    except SQLAlchemyError as e:
        raise DatastoreError(_datastore_message(e))
    if row is None:
        raise NotFound(f"{label} not found")
    return row


def apply_call_status(
    record: Dict[str, Any],
    now: datetime,
    called_count: int = 0,
    last_called_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Fill in the call counters from the stored values.

    Every write with call_status "Called" logs one more call at ``now``;
    any other status keeps the stored counters untouched.
    """
    if record["call_status"] == CALLED:
        record["called_count"] = (called_count or 0) + 1
        record["last_called_at"] = now
    else:
        record["called_count"] = called_count or 0
        record["last_called_at"] = last_called_at
    return record


# Companies

def create_company(db: Session, record: Dict[str, Any]) -> Company:
    now = utcnow()
    company = Company(**record, created_at=now, updated_at=now)
    db.add(company)
    _commit(db, Company, "create")
    db.refresh(company)
    logger.info("Company created", extra={"context": {"company_id": company.id}})
    return company


def update_company(db: Session, company_id: int, record: Dict[str, Any]) -> Company:
    company = _get(db, Company, company_id, "Company")
    for key, value in record.items():
        setattr(company, key, value)
    company.updated_at = utcnow()
    _commit(db, Company, "update", company_id)
    db.refresh(company)
    logger.info("Company updated", extra={"context": {"company_id": company_id}})
    return company


def delete_company(db: Session, company_id: int) -> None:
    company = _get(db, Company, company_id, "Company")
    db.delete(company)
    _commit(db, Company, "delete", company_id)
    logger.info("Company deleted", extra={"context": {"company_id": company_id}})


# Prospects

def create_prospect(db: Session, record: Dict[str, Any]) -> Prospect:
    now = utcnow()
    apply_call_status(record, now)
    prospect = Prospect(**record, created_at=now, updated_at=now)
    db.add(prospect)
    _commit(db, Prospect, "create")
    db.refresh(prospect)
    logger.info("Prospect created", extra={"context": {"prospect_id": prospect.id}})
    return prospect


def update_prospect(db: Session, prospect_id: int, record: Dict[str, Any]) -> Prospect:
    prospect = _get(db, Prospect, prospect_id, "Prospect")
    now = utcnow()
    apply_call_status(record, now, prospect.called_count, prospect.last_called_at)
    for key, value in record.items():
        setattr(prospect, key, value)
    prospect.updated_at = now
    _commit(db, Prospect, "update", prospect_id)
    db.refresh(prospect)
    logger.info(
        "Prospect updated",
        extra={"context": {"prospect_id": prospect_id, "call_status": prospect.call_status}},
    )
    return prospect


def delete_prospect(db: Session, prospect_id: int) -> None:
    prospect = _get(db, Prospect, prospect_id, "Prospect")
    db.delete(prospect)
    _commit(db, Prospect, "delete", prospect_id)
    logger.info("Prospect deleted", extra={"context": {"prospect_id": prospect_id}})
