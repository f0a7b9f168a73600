"""Field validation for company and prospect payloads.

Checks run in a fixed order and the first failing check is raised, so a
client always sees exactly one message naming one field. On success the
validators return a normalized dict ready to be written: strings trimmed,
empty optional fields as None.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from errors import FieldRequired, InvalidFormat, ValidationFailed

# 09 followed by 10 ASCII digits
PHONE_PATTERN = re.compile(r"^09[0-9]{10}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Suggestions offered by the UI; industry itself is free-form
INDUSTRIES = [
    "Technology",
    "Healthcare",
    "Finance",
    "Retail",
    "Manufacturing",
    "Education",
    "Hospitality",
    "Real Estate",
    "Energy",
    "Other",
]

COMPANY_STATUSES = ["Active", "Inactive", "Pending"]
CALL_STATUSES = ["Not Called", "Called", "No Answer", "Interested", "Not Interested"]
PROSPECT_STATUSES = ["Prospect", "Declined", "Not Sure", "Secured Client", "Ongoing Client"]

CALLED = "Called"

LABELS = {
    "company_name": "Company name",
    "client_name": "Client name",
    "contact_person": "Contact person",
    "contact_number": "Contact number",
    "email_address": "Email address",
    "industry": "Industry",
    "website": "Website",
    "remarks": "Remarks",
    "to_do": "To do",
    "status": "Status",
    "call_status": "Call status",
    "prospect_status": "Prospect status",
    "notes": "Notes",
    "remark": "Notes",
    "follow_up_date": "Follow-up date",
}


def _text(raw: Mapping[str, Any], field: str) -> Optional[str]:
    """Return the trimmed string value of ``field``, or None when blank."""
    value = raw.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidFormat(f"{LABELS[field]} must be a string", field=field)
    value = value.strip()
    return value or None


def _required(raw: Mapping[str, Any], field: str) -> str:
    value = _text(raw, field)
    if value is None:
        raise FieldRequired(f"{LABELS[field]} is required", field=field)
    return value


def _choice(value: Optional[str], field: str, choices, default: str) -> str:
    if value is None:
        return default
    if value not in choices:
        raise InvalidFormat(
            f"{LABELS[field]} must be one of: {', '.join(choices)}", field=field
        )
    return value


def _ensure_mapping(raw: Any) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise ValidationFailed("Request body must be a JSON object")
    return raw


def check_contact_number(value: str) -> str:
    if not PHONE_PATTERN.match(value):
        raise InvalidFormat(
            "Contact number must be 09 followed by 10 digits", field="contact_number"
        )
    return value


def check_email_address(value: str) -> str:
    if not EMAIL_PATTERN.match(value):
        raise InvalidFormat("Invalid email address", field="email_address")
    return value


def parse_date(value: Any, field: str) -> Optional[date]:
    """Accept ``YYYY-MM-DD`` or a full ISO-8601 timestamp (its date is kept)."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidFormat(f"{LABELS.get(field, field)} must be a date", field=field)
    value = value.strip()
    if not value:
        return None
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        raise InvalidFormat(
            f"{LABELS.get(field, field)} must be an ISO date (YYYY-MM-DD)", field=field
        )


def validate_company(raw: Any) -> Dict[str, Any]:
    raw = _ensure_mapping(raw)

    record = {
        "company_name": _required(raw, "company_name"),
        "client_name": _required(raw, "client_name"),
        "contact_number": _required(raw, "contact_number"),
        "email_address": _required(raw, "email_address"),
        "industry": _required(raw, "industry"),
    }
    check_contact_number(record["contact_number"])
    check_email_address(record["email_address"])

    record["status"] = _choice(_text(raw, "status"), "status", COMPANY_STATUSES, "Active")
    record["remarks"] = _text(raw, "remarks")
    record["to_do"] = _text(raw, "to_do")
    return record


def validate_prospect(raw: Any) -> Dict[str, Any]:
    """Validate a prospect payload.

    ``status`` and ``remark`` are accepted as older names for
    ``prospect_status`` and ``notes``. Industry is stored lowercase.
    Call counters are never taken from the payload; see
    :func:`store.apply_call_status`.
    """
    raw = _ensure_mapping(raw)

    record = {
        "company_name": _required(raw, "company_name"),
        "contact_person": _required(raw, "contact_person"),
        "contact_number": _required(raw, "contact_number"),
        "email_address": _required(raw, "email_address"),
        "industry": _required(raw, "industry").lower(),
    }
    check_contact_number(record["contact_number"])
    check_email_address(record["email_address"])

    record["website"] = _text(raw, "website")
    record["call_status"] = _choice(
        _text(raw, "call_status"), "call_status", CALL_STATUSES, "Not Called"
    )

    status_field = "prospect_status" if raw.get("prospect_status") is not None else "status"
    record["prospect_status"] = _choice(
        _text(raw, status_field), "prospect_status", PROSPECT_STATUSES, "Prospect"
    )

    notes_field = "notes" if raw.get("notes") is not None else "remark"
    record["notes"] = _text(raw, notes_field)
    record["follow_up_date"] = parse_date(raw.get("follow_up_date"), "follow_up_date")
    return record
