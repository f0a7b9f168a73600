"""Tests for the per-app database wiring."""

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, inspect, text

from config import Settings
from main import create_app
from tests.payloads import PASSWORD, USERNAME, company_payload


class TestAppDatabase:
    def test_app_uses_configured_database(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'crm.db'}"
        settings = Settings(
            database_url=url,
            admin_username=USERNAME,
            admin_password=PASSWORD,
            session_secret="test-signing-key",
            session_secret_generated=False,
        )

        # Entering the client runs startup, which creates the tables
        with TestClient(create_app(settings)) as client:
            client.post("/login", json={"username": USERNAME, "password": PASSWORD})
            response = client.post("/companies", json=company_payload())
            assert response.status_code == 201

        engine = create_engine(url)
        try:
            assert {"companies", "prospects"} <= set(inspect(engine).get_table_names())
            with engine.connect() as conn:
                names = conn.execute(text("SELECT company_name FROM companies")).scalars().all()
            assert names == ["Acme Corp"]
        finally:
            engine.dispose()
