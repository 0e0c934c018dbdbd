from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from metallbau.core.rates import DEFAULT_RATE_TABLE, RateTable
from metallbau.database import SessionLocal
from metallbau.models.activity_type import ActivityType
from metallbau.models.machine import Machine
from metallbau.models.machine_booking import MachineBooking
from metallbau.models.material_consumption import MaterialConsumption
from metallbau.models.product import Product
from metallbau.models.project import Project
from metallbau.models.project_cost_entry import ProjectCostEntry
from metallbau.models.project_phase import ProjectPhase
from metallbau.models.time_entry import TimeEntry, TimeEntrySurcharge
from metallbau.models.time_type import TimeType
from metallbau.services.errors import ForbiddenError, InvalidRequestError, NotFoundError
from metallbau.services.surcharge_resolver import WORK_LOCATION_WERKSTATT, resolve_labor_cost

logger = logging.getLogger(__name__)

SOURCE_TIME_ENTRY = "TIME_ENTRY"
SOURCE_MACHINE_BOOKING = "MACHINE_BOOKING"
SOURCE_MATERIAL_CONSUMPTION = "MATERIAL_CONSUMPTION"


def _to_cents(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _get_open_project(db: Session, company_id: int, project_id: int, action: str) -> Project:
    project = (
        db.query(Project)
        .filter(Project.id == int(project_id), Project.company_id == int(company_id))
        .first()
    )
    if project is None:
        raise NotFoundError("Project not found")
    if project.is_closed:
        raise ForbiddenError(f"Cannot book {action} to closed project")
    return project


def _check_phase(db: Session, company_id: int, project_id: int, project_phase_id: Optional[int]) -> None:
    if project_phase_id is None:
        return
    phase = (
        db.query(ProjectPhase)
        .filter(
            ProjectPhase.id == int(project_phase_id),
            ProjectPhase.company_id == int(company_id),
            ProjectPhase.project_id == int(project_id),
        )
        .first()
    )
    if phase is None:
        raise NotFoundError("Project phase not found")


def _post_cost_entry(
    db: Session,
    *,
    company_id: int,
    project_id: int,
    project_phase_id: Optional[int],
    entry_date: date,
    cost_type: str,
    source_type: str,
    source_id: int,
    amount_cents: int,
    description: str,
) -> ProjectCostEntry:
    """
    Append one ledger row and bump projects.actual_cost_total_cents by the same
    amount. The increment is a single UPDATE ... SET x = x + :delta so
    concurrent bookings on one project cannot lose updates.
    """
    entry = ProjectCostEntry(
        company_id=company_id,
        project_id=project_id,
        project_phase_id=project_phase_id,
        entry_date=entry_date,
        cost_type=cost_type,
        source_type=source_type,
        source_id=source_id,
        amount_cents=amount_cents,
        is_direct_cost=True,
        description=description,
    )
    db.add(entry)

    db.query(Project).filter(
        Project.id == int(project_id),
        Project.company_id == int(company_id),
    ).update(
        {Project.actual_cost_total_cents: Project.actual_cost_total_cents + int(amount_cents)},
        synchronize_session=False,
    )
    db.flush()
    return entry


def book_labor_time(
    company_id: int,
    user_id: str,
    *,
    entry_date: date,
    duration_minutes: int,
    time_type_code: str,
    project_id: Optional[int] = None,
    project_phase_id: Optional[int] = None,
    work_location: str = WORK_LOCATION_WERKSTATT,
    surcharges: Iterable[str] = (),
    base_hourly_rate_cents: Optional[int] = None,
    activity_type_id: Optional[int] = None,
    cost_center_id: Optional[int] = None,
    machine_id: Optional[int] = None,
    description: Optional[str] = None,
    rates: RateTable = DEFAULT_RATE_TABLE,
    db: Optional[Session] = None,
) -> TimeEntry:
    """
    Record a labor booking with its surcharges.

    Only project-relevant time types produce a LABOR cost entry and move the
    project total; other time (admin, training, absence) is stored but stays
    outside cost accounting.

    If db is provided, this function will NOT commit/close. Caller owns the transaction.
    If db is None, this function manages its own session + commit.
    """
    owns_db = db is None
    if owns_db:
        db = SessionLocal()

    try:
        time_type = (
            db.query(TimeType)
            .filter(TimeType.company_id == int(company_id), TimeType.code == str(time_type_code))
            .first()
        )
        if time_type is None:
            raise InvalidRequestError(
                f"TimeType {time_type_code} not found. Please seed default time types first."
            )

        if time_type.is_project_relevant and project_id is None:
            raise InvalidRequestError("Project is required for project-relevant time types")
        if not time_type.is_project_relevant and project_id is not None:
            raise InvalidRequestError("Project is not allowed for non-project-relevant time types")
        if project_id is None and project_phase_id is not None:
            raise InvalidRequestError("Project phase requires a project")

        if project_id is not None:
            _get_open_project(db, company_id, project_id, "time")
            _check_phase(db, company_id, project_id, project_phase_id)

        if activity_type_id is not None:
            activity_type = (
                db.query(ActivityType)
                .filter(ActivityType.id == int(activity_type_id), ActivityType.company_id == int(company_id))
                .first()
            )
            if activity_type is None:
                raise NotFoundError("Activity type not found")

        if machine_id is not None:
            machine = (
                db.query(Machine)
                .filter(Machine.id == int(machine_id), Machine.company_id == int(company_id))
                .first()
            )
            if machine is None:
                raise NotFoundError("Machine not found")

        cost = resolve_labor_cost(
            duration_minutes=duration_minutes,
            surcharges=surcharges,
            work_location=work_location,
            base_hourly_rate_cents=base_hourly_rate_cents,
            rates=rates,
        )

        time_entry = TimeEntry(
            company_id=int(company_id),
            user_id=str(user_id),
            date=entry_date,
            duration_minutes=int(duration_minutes),
            time_type_id=time_type.id,
            activity_type_id=activity_type_id,
            cost_center_id=cost_center_id,
            project_id=project_id,
            project_phase_id=project_phase_id,
            machine_id=machine_id,
            work_location=work_location,
            base_hourly_rate_cents=cost.base_hourly_rate_cents,
            surcharge_total_cents=cost.surcharge_total_cents,
            effective_hourly_rate_cents=cost.effective_hourly_rate_cents,
            total_cost_cents=cost.total_cost_cents,
            is_billable=bool(time_type.is_billable),
            description=description,
        )
        db.add(time_entry)
        db.flush()

        for line in cost.lines:
            db.add(
                TimeEntrySurcharge(
                    time_entry_id=time_entry.id,
                    surcharge_type=line.surcharge_type.value,
                    surcharge_percent=line.surcharge_percent,
                    surcharge_amount_cents=line.surcharge_amount_cents,
                )
            )

        if time_type.is_project_relevant:
            _post_cost_entry(
                db,
                company_id=int(company_id),
                project_id=int(project_id),
                project_phase_id=project_phase_id,
                entry_date=entry_date,
                cost_type="LABOR",
                source_type=SOURCE_TIME_ENTRY,
                source_id=time_entry.id,
                amount_cents=cost.total_cost_cents,
                description=f"Personalkosten: {description or 'Zeitbuchung'}",
            )

        db.flush()
        db.refresh(time_entry)

        if owns_db:
            db.commit()

        logger.info(
            "labor time booked",
            extra={
                "company_id": int(company_id),
                "time_entry_id": time_entry.id,
                "project_id": project_id,
                "total_cost_cents": cost.total_cost_cents,
                "rate_table": rates.version,
            },
        )
        return time_entry
    except Exception:
        if owns_db:
            db.rollback()
        raise
    finally:
        if owns_db:
            db.close()


def book_machine_time(
    company_id: int,
    *,
    machine_id: int,
    project_id: int,
    duration_hours: Decimal,
    project_phase_id: Optional[int] = None,
    booking_date: Optional[date] = None,
    operator_id: Optional[str] = None,
    description: Optional[str] = None,
    db: Optional[Session] = None,
) -> MachineBooking:
    """
    Book machine hours against a project.

    The machine's hourly rate is copied onto the booking, so later rate
    changes do not touch historical cost.

    If db is provided, this function will NOT commit/close. Caller owns the transaction.
    If db is None, this function manages its own session + commit.
    """
    owns_db = db is None
    if owns_db:
        db = SessionLocal()

    try:
        hours = Decimal(str(duration_hours))
        if hours <= 0:
            raise InvalidRequestError("duration_hours must be greater than 0")

        machine = (
            db.query(Machine)
            .filter(Machine.id == int(machine_id), Machine.company_id == int(company_id))
            .first()
        )
        if machine is None:
            raise NotFoundError("Machine not found")

        _get_open_project(db, company_id, project_id, "machine time")

        if machine.status != "ACTIVE":
            raise ForbiddenError("Machine is not active")

        _check_phase(db, company_id, project_id, project_phase_id)

        hourly_rate_cents = int(machine.hourly_rate_cents)
        total_cost_cents = _to_cents(hours * hourly_rate_cents)

        booking = MachineBooking(
            company_id=int(company_id),
            machine_id=machine.id,
            project_id=int(project_id),
            project_phase_id=project_phase_id,
            booking_date=booking_date or date.today(),
            duration_hours=hours,
            hourly_rate_cents=hourly_rate_cents,
            total_cost_cents=total_cost_cents,
            operator_id=operator_id,
            description=description,
        )
        db.add(booking)
        db.flush()

        _post_cost_entry(
            db,
            company_id=int(company_id),
            project_id=int(project_id),
            project_phase_id=project_phase_id,
            entry_date=booking.booking_date,
            cost_type="MACHINE",
            source_type=SOURCE_MACHINE_BOOKING,
            source_id=booking.id,
            amount_cents=total_cost_cents,
            description=f"Maschinenkosten: {machine.name}",
        )

        db.refresh(booking)

        if owns_db:
            db.commit()

        logger.info(
            "machine time booked",
            extra={
                "company_id": int(company_id),
                "machine_booking_id": booking.id,
                "machine_id": machine.id,
                "project_id": int(project_id),
                "total_cost_cents": total_cost_cents,
            },
        )
        return booking
    except Exception:
        if owns_db:
            db.rollback()
        raise
    finally:
        if owns_db:
            db.close()


def book_material_consumption(
    company_id: int,
    *,
    product_id: int,
    project_id: int,
    quantity: Decimal,
    unit: str,
    project_phase_id: Optional[int] = None,
    consumption_date: Optional[date] = None,
    consumption_type: str = "PRODUCTION",
    scrap_quantity: Decimal = Decimal(0),
    description: Optional[str] = None,
    db: Optional[Session] = None,
) -> MaterialConsumption:
    """
    Book material taken from stock onto a project.

    Stock is decremented without a sufficiency check; it may go negative.

    If db is provided, this function will NOT commit/close. Caller owns the transaction.
    If db is None, this function manages its own session + commit.
    """
    owns_db = db is None
    if owns_db:
        db = SessionLocal()

    try:
        qty = Decimal(str(quantity))
        if qty <= 0:
            raise InvalidRequestError("quantity must be greater than 0")

        product = (
            db.query(Product)
            .filter(Product.id == int(product_id), Product.company_id == int(company_id))
            .first()
        )
        if product is None:
            raise NotFoundError("Product not found")

        _get_open_project(db, company_id, project_id, "material")
        _check_phase(db, company_id, project_id, project_phase_id)

        unit_price_cents = int(product.purchase_price_cents or 0)
        total_cost_cents = _to_cents(qty * unit_price_cents)

        consumption = MaterialConsumption(
            company_id=int(company_id),
            product_id=product.id,
            project_id=int(project_id),
            project_phase_id=project_phase_id,
            consumption_date=consumption_date or date.today(),
            quantity=qty,
            unit=unit,
            unit_price_cents=unit_price_cents,
            total_cost_cents=total_cost_cents,
            consumption_type=consumption_type,
            scrap_quantity=Decimal(str(scrap_quantity or 0)),
            description=description,
        )
        db.add(consumption)
        db.flush()

        _post_cost_entry(
            db,
            company_id=int(company_id),
            project_id=int(project_id),
            project_phase_id=project_phase_id,
            entry_date=consumption.consumption_date,
            cost_type="MATERIAL",
            source_type=SOURCE_MATERIAL_CONSUMPTION,
            source_id=consumption.id,
            amount_cents=total_cost_cents,
            description=f"Material: {product.name}",
        )

        db.query(Product).filter(
            Product.id == product.id,
            Product.company_id == int(company_id),
        ).update(
            {Product.stock_quantity: Product.stock_quantity - qty},
            synchronize_session=False,
        )
        db.flush()
        db.refresh(consumption)

        if owns_db:
            db.commit()

        logger.info(
            "material consumption booked",
            extra={
                "company_id": int(company_id),
                "material_consumption_id": consumption.id,
                "product_id": product.id,
                "project_id": int(project_id),
                "total_cost_cents": total_cost_cents,
            },
        )
        return consumption
    except Exception:
        if owns_db:
            db.rollback()
        raise
    finally:
        if owns_db:
            db.close()
