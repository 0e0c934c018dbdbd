from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from metallbau.core.authorization import Role, require_role
from metallbau.database import SessionLocal
from metallbau.deps.auth import require_auth
from metallbau.routers.errors import to_http
from metallbau.schemas.booking import (
    LaborBookingCreate,
    MachineBookingCreate,
    MachineBookingResponse,
    MaterialConsumptionCreate,
    MaterialConsumptionResponse,
    TimeEntryResponse,
)
from metallbau.schemas.controlling import (
    CostEntryPage,
    CostTotalsResponse,
    ProjectControllingResponse,
    ReconciliationResponse,
)
from metallbau.services import cost_booking_service, reconciliation_service
from metallbau.services.controlling_service import project_controlling
from metallbau.services.errors import CostingError
from metallbau.services.ledger_reporting_service import cost_totals, list_cost_entries

router = APIRouter(prefix="/metallbau", tags=["Costing"])


# ---------- Bookings ----------

@router.post("/time-entries", response_model=TimeEntryResponse)
def create_time_entry(
    payload: LaborBookingCreate,
    request: Request,
    _auth: tuple[str, int] = Depends(require_auth),
):
    db = SessionLocal()
    try:
        entry = cost_booking_service.book_labor_time(
            int(request.state.company_id),
            str(request.state.user_id),
            entry_date=payload.date,
            duration_minutes=payload.duration_minutes,
            time_type_code=payload.time_type_code,
            project_id=payload.project_id,
            project_phase_id=payload.project_phase_id,
            work_location=payload.work_location,
            surcharges=payload.surcharges,
            base_hourly_rate_cents=payload.base_hourly_rate_cents,
            activity_type_id=payload.activity_type_id,
            cost_center_id=payload.cost_center_id,
            machine_id=payload.machine_id,
            description=payload.description,
            db=db,
        )
        db.commit()
        db.refresh(entry)
        return TimeEntryResponse.model_validate(entry)
    except CostingError as exc:
        db.rollback()
        raise to_http(exc) from exc
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@router.post("/machine-bookings", response_model=MachineBookingResponse)
def create_machine_booking(
    payload: MachineBookingCreate,
    request: Request,
    _auth: tuple[str, int] = Depends(require_auth),
):
    db = SessionLocal()
    try:
        booking = cost_booking_service.book_machine_time(
            int(request.state.company_id),
            machine_id=payload.machine_id,
            project_id=payload.project_id,
            project_phase_id=payload.project_phase_id,
            duration_hours=payload.duration_hours,
            booking_date=payload.booking_date,
            operator_id=payload.operator_id,
            description=payload.description,
            db=db,
        )
        db.commit()
        db.refresh(booking)
        return booking
    except CostingError as exc:
        db.rollback()
        raise to_http(exc) from exc
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@router.post("/material-consumptions", response_model=MaterialConsumptionResponse)
def create_material_consumption(
    payload: MaterialConsumptionCreate,
    request: Request,
    _auth: tuple[str, int] = Depends(require_auth),
):
    db = SessionLocal()
    try:
        consumption = cost_booking_service.book_material_consumption(
            int(request.state.company_id),
            product_id=payload.product_id,
            project_id=payload.project_id,
            project_phase_id=payload.project_phase_id,
            quantity=payload.quantity,
            unit=payload.unit,
            consumption_date=payload.consumption_date,
            consumption_type=payload.consumption_type,
            scrap_quantity=payload.scrap_quantity,
            description=payload.description,
            db=db,
        )
        db.commit()
        db.refresh(consumption)
        return consumption
    except CostingError as exc:
        db.rollback()
        raise to_http(exc) from exc
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# ---------- Ledger ----------

@router.get("/cost-entries", response_model=CostEntryPage)
def get_cost_entries(
    request: Request,
    project_id: Optional[int] = None,
    cost_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=500),
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        return list_cost_entries(
            company_id=int(request.state.company_id),
            db=db,
            project_id=project_id,
            cost_type=cost_type,
            date_start=start_date,
            date_end=end_date,
            page=page,
            page_size=page_size,
        )
    finally:
        db.close()


@router.get("/cost-entries/totals", response_model=CostTotalsResponse)
def get_cost_totals(
    request: Request,
    date_start: date,
    date_end: date,
    project_id: Optional[int] = None,
    cost_type: Optional[str] = None,
    _role=Depends(require_role(Role.MANAGER)),
):
    if date_end < date_start:
        raise HTTPException(status_code=400, detail="date_end must not be before date_start")

    db = SessionLocal()
    try:
        return cost_totals(
            company_id=int(request.state.company_id),
            db=db,
            date_start=date_start,
            date_end=date_end,
            project_id=project_id,
            cost_type=cost_type,
        )
    finally:
        db.close()


# ---------- Controlling ----------

@router.get("/projects/{project_id}/controlling", response_model=ProjectControllingResponse)
def get_project_controlling(
    project_id: int,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        return project_controlling(
            company_id=int(request.state.company_id),
            project_id=int(project_id),
            db=db,
        )
    except CostingError as exc:
        raise to_http(exc) from exc
    finally:
        db.close()


@router.get("/projects/{project_id}/reconciliation", response_model=ReconciliationResponse)
def get_project_reconciliation(
    project_id: int,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        return reconciliation_service.check_project_cost_total(
            company_id=int(request.state.company_id),
            project_id=int(project_id),
            db=db,
        )
    except CostingError as exc:
        raise to_http(exc) from exc
    finally:
        db.close()


@router.post("/projects/{project_id}/reconciliation/repair", response_model=ReconciliationResponse)
def repair_project_reconciliation(
    project_id: int,
    request: Request,
    _role=Depends(require_role(Role.ADMIN)),
):
    db = SessionLocal()
    try:
        result = reconciliation_service.repair_project_cost_total(
            company_id=int(request.state.company_id),
            project_id=int(project_id),
            db=db,
        )
        db.commit()
        return result
    except CostingError as exc:
        db.rollback()
        raise to_http(exc) from exc
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
