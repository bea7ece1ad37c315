import importlib.util
from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy.exc import IntegrityError

VERSIONS = Path(__file__).resolve().parents[1] / "alembic" / "versions"


def _load_revision():
    path = VERSIONS / "3c1a9d2f7b40_create_users.py"
    spec = importlib.util.spec_from_file_location("create_users", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_users_migration_upgrade_and_downgrade():
    revision = _load_revision()
    engine = sa.create_engine("sqlite://", future=True)
    with engine.connect() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            revision.upgrade()
        conn.commit()
        indexes = {i["name"]: i for i in sa.inspect(conn).get_indexes("users")}
        assert bool(indexes["ix_users_email"]["unique"])

        insert = sa.text(
            "INSERT INTO users (id, name, email, password_hash, role_type,"
            " advisory_profile, created_at, updated_at)"
            " VALUES (:id, 'A', 'a@b.com', 'x', 'advisory', '{}',"
            " CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)"
        )
        conn.execute(insert, {"id": "1"})
        with pytest.raises(IntegrityError):
            conn.execute(insert, {"id": "2"})
        conn.rollback()

        with Operations.context(MigrationContext.configure(conn)):
            revision.downgrade()
        assert "users" not in sa.inspect(conn).get_table_names()
