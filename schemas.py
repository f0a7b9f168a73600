from datetime import date, datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer


def as_utc(value: datetime) -> str:
    # SQLite returns stored timestamps without their offset; they are UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class CompanyResponse(BaseModel):
    id: int
    company_name: str
    client_name: str
    contact_number: str
    email_address: str
    industry: str
    remarks: Optional[str] = None
    to_do: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer("created_at", "updated_at", when_used="json")
    def serialize_timestamp(self, value: datetime) -> str:
        return as_utc(value)


class ProspectResponse(BaseModel):
    id: int
    company_name: str
    contact_person: str
    contact_number: str
    email_address: str
    industry: str
    website: Optional[str] = None
    call_status: str
    prospect_status: str
    called_count: int
    last_called_at: Optional[datetime] = None
    notes: Optional[str] = None
    follow_up_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_serializer("created_at", "updated_at", "last_called_at", when_used="json-unless-none")
    def serialize_timestamp(self, value: datetime) -> str:
        return as_utc(value)


class Pagination(BaseModel):
    page: int
    page_size: int = Field(alias="pageSize")
    total: int
    total_pages: int = Field(alias="totalPages")

    class Config:
        populate_by_name = True


class CompanyList(BaseModel):
    data: List[CompanyResponse]
    pagination: Pagination


class ProspectList(BaseModel):
    data: List[ProspectResponse]
    pagination: Pagination


class CompanyResult(BaseModel):
    data: CompanyResponse
    success: bool = True


class ProspectResult(BaseModel):
    data: ProspectResponse
    success: bool = True


class SuccessResponse(BaseModel):
    success: bool = True


class FilterOptions(BaseModel):
    industries: List[str]
    company_statuses: List[str]
    call_statuses: List[str]
    prospect_statuses: List[str]
