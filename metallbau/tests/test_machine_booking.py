from datetime import date
from decimal import Decimal

import pytest

from metallbau.database import SessionLocal
from metallbau.models.machine import Machine
from metallbau.models.machine_booking import MachineBooking
from metallbau.models.project import Project
from metallbau.models.project_cost_entry import ProjectCostEntry
from metallbau.services.cost_booking_service import book_machine_time
from metallbau.services.errors import ForbiddenError, InvalidRequestError, NotFoundError


def test_machine_booking_snapshots_rate_and_posts_ledger(project_factory, machine_factory):
    company_id = 401
    project = project_factory(company_id)
    machine = machine_factory(company_id, hourly_rate_cents=12000)

    booking = book_machine_time(
        company_id,
        machine_id=machine.id,
        project_id=project.id,
        duration_hours=Decimal("2.5"),
        booking_date=date(2026, 4, 1),
    )

    assert booking.hourly_rate_cents == 12000
    assert booking.total_cost_cents == 30000

    db = SessionLocal()
    try:
        db.query(Machine).filter(Machine.id == machine.id).update({Machine.hourly_rate_cents: 20000})
        db.commit()

        stored = db.query(MachineBooking).filter(MachineBooking.id == booking.id).one()
        ledger = db.query(ProjectCostEntry).filter(ProjectCostEntry.project_id == project.id).one()
        project_row = db.query(Project).filter(Project.id == project.id).one()
    finally:
        db.close()

    assert stored.hourly_rate_cents == 12000
    assert stored.total_cost_cents == 30000
    assert ledger.cost_type == "MACHINE"
    assert ledger.source_type == "MACHINE_BOOKING"
    assert ledger.source_id == booking.id
    assert ledger.amount_cents == 30000
    assert project_row.actual_cost_total_cents == 30000


def test_inactive_machine_is_forbidden(project_factory, machine_factory):
    company_id = 402
    project = project_factory(company_id)
    machine = machine_factory(company_id, status="MAINTENANCE")

    with pytest.raises(ForbiddenError, match="not active"):
        book_machine_time(company_id, machine_id=machine.id, project_id=project.id, duration_hours=1)


def test_closed_project_rejects_machine_time(project_factory, machine_factory):
    company_id = 403
    project = project_factory(company_id, status="CANCELLED")
    machine = machine_factory(company_id)

    with pytest.raises(ForbiddenError, match="closed project"):
        book_machine_time(company_id, machine_id=machine.id, project_id=project.id, duration_hours=1)

    db = SessionLocal()
    try:
        assert db.query(MachineBooking).filter(MachineBooking.company_id == company_id).count() == 0
    finally:
        db.close()


def test_machine_of_other_company_is_not_found(project_factory, machine_factory):
    project = project_factory(404)
    foreign_machine = machine_factory(405)

    with pytest.raises(NotFoundError, match="Machine not found"):
        book_machine_time(404, machine_id=foreign_machine.id, project_id=project.id, duration_hours=1)


@pytest.mark.parametrize("hours", ["0", "-1.5"])
def test_non_positive_hours_are_rejected(project_factory, machine_factory, hours):
    company_id = 406
    project = project_factory(company_id)
    machine = machine_factory(company_id)

    with pytest.raises(InvalidRequestError):
        book_machine_time(company_id, machine_id=machine.id, project_id=project.id, duration_hours=Decimal(hours))
