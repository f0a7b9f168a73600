from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import validates

from database import Base


def utcnow():
    return datetime.now(timezone.utc)


def name_key(name):
    """Case-folded company name used for the uniqueness check."""
    return name.casefold() if name is not None else None


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    company_name = Column(String, nullable=False, index=True)
    client_name = Column(String, nullable=False)
    contact_number = Column(String, nullable=False)
    email_address = Column(String, nullable=False)
    industry = Column(String, nullable=False, index=True)
    remarks = Column(Text, nullable=True)
    to_do = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="Active", index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Prospect(Base):
    __tablename__ = "prospects"

    id = Column(Integer, primary_key=True, index=True)
    company_name = Column(String, nullable=False)
    # Kept in step with company_name by _sync_name_key
    company_name_key = Column(String, nullable=False)
    contact_person = Column(String, nullable=False)
    contact_number = Column(String, nullable=False)
    email_address = Column(String, nullable=False)
    industry = Column(String, nullable=False, index=True)  # stored lowercase
    website = Column(String, nullable=True)

    # Call tracking
    call_status = Column(String, nullable=False, default="Not Called", index=True)
    prospect_status = Column(String, nullable=False, default="Prospect", index=True)
    called_count = Column(Integer, nullable=False, default=0)
    last_called_at = Column(DateTime(timezone=True), nullable=True)

    notes = Column(Text, nullable=True)
    follow_up_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    @validates("company_name")
    def _sync_name_key(self, key, value):
        self.company_name_key = name_key(value)
        return value


# Company names are unique regardless of case. The key is folded in Python
# because SQLite's lower() only folds ASCII letters.
Index("uq_prospects_company_name_key", Prospect.company_name_key, unique=True)
