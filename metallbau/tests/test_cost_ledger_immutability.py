from datetime import date

import pytest
from sqlalchemy.exc import DBAPIError

from metallbau import database
from metallbau.database import SessionLocal
from metallbau.models.project_cost_entry import ProjectCostEntry
from metallbau.services.ledger_immutability import is_postgres

pytestmark = pytest.mark.skipif(
    not is_postgres(database.engine),
    reason="ledger mutation triggers are postgres-only",
)


def _ledger_row(db, project_id: int) -> ProjectCostEntry:
    row = ProjectCostEntry(
        company_id=999,
        project_id=project_id,
        entry_date=date(2026, 1, 5),
        cost_type="LABOR",
        source_type="TIME_ENTRY",
        source_id=1,
        amount_cents=1,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def test_cost_entry_update_is_blocked(project_factory):
    project = project_factory(999)
    db = SessionLocal()
    try:
        row = _ledger_row(db, project.id)

        row.amount_cents = 2
        with pytest.raises(DBAPIError):
            db.commit()
    finally:
        db.rollback()
        db.close()


def test_cost_entry_delete_is_blocked(project_factory):
    project = project_factory(999)
    db = SessionLocal()
    try:
        row = _ledger_row(db, project.id)

        db.delete(row)
        with pytest.raises(DBAPIError):
            db.commit()
    finally:
        db.rollback()
        db.close()
