from datetime import date
from decimal import Decimal

import pytest

from metallbau.database import SessionLocal
from metallbau.models.project import Project
from metallbau.services.cost_booking_service import book_machine_time, book_material_consumption
from metallbau.services.errors import NotFoundError
from metallbau.services.reconciliation_service import check_project_cost_total, repair_project_cost_total


def test_bookings_keep_project_total_in_line_with_ledger(project_factory, machine_factory, product_factory):
    company_id = 701
    project = project_factory(company_id)
    machine = machine_factory(company_id, hourly_rate_cents=9000)
    product = product_factory(company_id, purchase_price_cents=450)

    book_machine_time(company_id, machine_id=machine.id, project_id=project.id, duration_hours=Decimal("1.25"))
    book_material_consumption(
        company_id,
        product_id=product.id,
        project_id=project.id,
        quantity=Decimal("3"),
        unit="Stk",
        consumption_date=date(2026, 6, 1),
    )

    db = SessionLocal()
    try:
        result = check_project_cost_total(company_id=company_id, project_id=project.id, db=db)
    finally:
        db.close()

    assert result["ok"] is True
    assert result["delta_cents"] == 0
    assert result["ledger_total_cents"] == 11250 + 1350


def test_repair_resets_drifted_total_to_ledger_sum(project_factory, machine_factory):
    company_id = 702
    project = project_factory(company_id)
    machine = machine_factory(company_id, hourly_rate_cents=10000)
    book_machine_time(company_id, machine_id=machine.id, project_id=project.id, duration_hours=Decimal("2"))

    db = SessionLocal()
    try:
        db.query(Project).filter(Project.id == project.id).update({Project.actual_cost_total_cents: 12345})
        db.commit()

        drifted = check_project_cost_total(company_id=company_id, project_id=project.id, db=db)
        assert drifted["ok"] is False
        assert drifted["delta_cents"] == 12345 - 20000

        repaired = repair_project_cost_total(company_id=company_id, project_id=project.id, db=db)
        db.commit()
        assert repaired["repaired"] is True
        assert repaired["ok"] is True

        after = check_project_cost_total(company_id=company_id, project_id=project.id, db=db)
    finally:
        db.close()

    assert after["ok"] is True
    assert after["project_total_cents"] == 20000


def test_repair_is_noop_when_consistent(project_factory):
    project = project_factory(703)

    db = SessionLocal()
    try:
        result = repair_project_cost_total(company_id=703, project_id=project.id, db=db)
    finally:
        db.close()

    assert result["repaired"] is False
    assert result["ok"] is True


def test_reconciliation_is_tenant_scoped(project_factory):
    project = project_factory(704)

    db = SessionLocal()
    try:
        with pytest.raises(NotFoundError):
            check_project_cost_total(company_id=705, project_id=project.id, db=db)
    finally:
        db.close()
