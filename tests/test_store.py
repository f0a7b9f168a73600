"""Tests for datastore writes and call tracking."""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

import store
from errors import DatastoreError, DuplicateEntry, NotFound
from models import Company, Prospect
from tests.payloads import company_payload, prospect_payload
from validation import validate_company, validate_prospect


class TestApplyCallStatus:
    NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
    EARLIER = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)

    def test_called_increments_and_stamps(self):
        record = store.apply_call_status({"call_status": "Called"}, self.NOW, 2, self.EARLIER)
        assert record["called_count"] == 3
        assert record["last_called_at"] == self.NOW

    def test_other_status_keeps_stored_values(self):
        record = store.apply_call_status({"call_status": "No Answer"}, self.NOW, 2, self.EARLIER)
        assert record["called_count"] == 2
        assert record["last_called_at"] == self.EARLIER

    def test_new_row_defaults(self):
        record = store.apply_call_status({"call_status": "Not Called"}, self.NOW)
        assert record["called_count"] == 0
        assert record["last_called_at"] is None


class TestCompanies:
    def test_create_sets_timestamps(self, db):
        company = store.create_company(db, validate_company(company_payload()))
        assert company.id is not None
        assert company.created_at is not None
        assert company.updated_at is not None
        assert company.status == "Active"

    def test_update_replaces_fields(self, db):
        company = store.create_company(
            db, validate_company(company_payload(remarks="first"))
        )
        updated = store.update_company(
            db, company.id, validate_company(company_payload(client_name="New Person"))
        )
        assert updated.client_name == "New Person"
        # full replace: omitted optional field is cleared
        assert updated.remarks is None

    def test_update_missing(self, db):
        with pytest.raises(NotFound):
            store.update_company(db, 999, validate_company(company_payload()))

    def test_delete(self, db):
        company = store.create_company(db, validate_company(company_payload()))
        store.delete_company(db, company.id)
        assert db.get(Company, company.id) is None

    def test_delete_missing(self, db):
        with pytest.raises(NotFound, match="Company not found"):
            store.delete_company(db, 999)

    def test_datastore_message_passed_through(self, db, monkeypatch):
        def fail():
            raise OperationalError("INSERT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", fail)
        with pytest.raises(DatastoreError, match="database is locked"):
            store.create_company(db, validate_company(company_payload()))


class TestProspects:
    def test_duplicate_name_ignoring_case(self, db):
        store.create_prospect(db, validate_prospect(prospect_payload(company_name="Acme Corp")))
        with pytest.raises(DuplicateEntry):
            store.create_prospect(
                db, validate_prospect(prospect_payload(company_name="acme corp"))
            )
        assert db.query(Prospect).count() == 1

    def test_update_keeps_own_name(self, db):
        prospect = store.create_prospect(db, validate_prospect(prospect_payload()))
        updated = store.update_prospect(
            db, prospect.id, validate_prospect(prospect_payload(company_name="ACME CORP"))
        )
        assert updated.company_name == "ACME CORP"

    def test_update_into_other_name(self, db):
        store.create_prospect(db, validate_prospect(prospect_payload(company_name="Acme Corp")))
        other = store.create_prospect(
            db, validate_prospect(prospect_payload(company_name="Beta"))
        )
        with pytest.raises(DuplicateEntry):
            store.update_prospect(
                db, other.id, validate_prospect(prospect_payload(company_name="acme CORP"))
            )
        db.expire_all()
        assert db.get(Prospect, other.id).company_name == "Beta"

    def test_called_counter_uses_stored_count(self, db):
        prospect = store.create_prospect(db, validate_prospect(prospect_payload()))
        assert prospect.called_count == 0

        for expected in (1, 2):
            prospect = store.update_prospect(
                db, prospect.id, validate_prospect(prospect_payload(call_status="Called"))
            )
            assert prospect.called_count == expected

        stamped = prospect.last_called_at
        prospect = store.update_prospect(
            db, prospect.id, validate_prospect(prospect_payload(call_status="Interested"))
        )
        assert prospect.called_count == 2
        assert prospect.last_called_at == stamped

    def test_created_as_called(self, db):
        prospect = store.create_prospect(
            db, validate_prospect(prospect_payload(call_status="Called"))
        )
        assert prospect.called_count == 1
        assert prospect.last_called_at is not None

    def test_delete_missing(self, db):
        with pytest.raises(NotFound, match="Prospect not found"):
            store.delete_prospect(db, 12345)

    def test_duplicate_name_beyond_ascii(self, db):
        store.create_prospect(db, validate_prospect(prospect_payload(company_name="Élan Corp")))
        with pytest.raises(DuplicateEntry):
            store.create_prospect(
                db, validate_prospect(prospect_payload(company_name="élan corp"))
            )
        assert db.query(Prospect).count() == 1

    def test_name_key_follows_renames(self, db):
        prospect = store.create_prospect(
            db, validate_prospect(prospect_payload(company_name="PEÑA Corp"))
        )
        assert prospect.company_name_key == "peña corp"

        updated = store.update_prospect(
            db, prospect.id, validate_prospect(prospect_payload(company_name="Straße GmbH"))
        )
        assert updated.company_name_key == "strasse gmbh"
