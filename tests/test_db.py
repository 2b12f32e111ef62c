"""Tests for onboard.db module and the Document model."""

from sqlalchemy import inspect, select

from onboard.db import get_database_url, init_db
from onboard.models import Document


class TestInitDb:
    """Tests for database initialization."""

    def test_creates_database_file(self, tmp_path):
        """init_db should create the database file and its parent directory."""
        db_path = tmp_path / "data" / "onboard.db"
        engine, _ = init_db(db_path)
        try:
            assert db_path.exists()
        finally:
            engine.dispose()

    def test_creates_documents_table(self, tmp_path):
        engine, _ = init_db(tmp_path / "onboard.db")
        try:
            assert "documents" in inspect(engine).get_table_names()
        finally:
            engine.dispose()

    def test_idempotent(self, tmp_path):
        """init_db should be safe to call multiple times."""
        db_path = tmp_path / "onboard.db"
        engine1, _ = init_db(db_path)
        engine2, _ = init_db(db_path)
        try:
            assert "documents" in inspect(engine2).get_table_names()
        finally:
            engine1.dispose()
            engine2.dispose()

    def test_database_url(self, tmp_path):
        assert get_database_url(tmp_path / "x.db") == f"sqlite:///{tmp_path / 'x.db'}"


class TestDocumentModel:
    """Tests for the JSON document row."""

    def test_body_round_trips_order_and_values(self, tmp_path):
        engine, SessionFactory = init_db(tmp_path / "onboard.db")
        body = [
            {"Employee Id": "HAYHAH1234", "Email Address": "Jane.Doe@yopmail.com"},
            {"Employee Id": "HAYHAH5678", "Email Address": None},
        ]
        try:
            with SessionFactory() as session:
                session.add(Document(name="users", body=body))
                session.commit()

            with SessionFactory() as session:
                doc = session.execute(select(Document).where(Document.name == "users")).scalar_one()
                assert doc.body == body
                assert doc.created_at is not None
                assert doc.updated_at is not None
        finally:
            engine.dispose()

    def test_body_defaults_to_empty_list(self, tmp_path):
        engine, SessionFactory = init_db(tmp_path / "onboard.db")
        try:
            with SessionFactory() as session:
                session.add(Document(name="users"))
                session.commit()
                assert session.get(Document, "users").body == []
        finally:
            engine.dispose()
