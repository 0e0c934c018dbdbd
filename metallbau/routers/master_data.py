from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from metallbau.core.authorization import Role, require_role
from metallbau.database import SessionLocal
from metallbau.deps.auth import require_auth
from metallbau.routers.errors import to_http
from metallbau.schemas.master_data import (
    ActivityTypeCreate,
    ActivityTypeResponse,
    BudgetLineCreate,
    BudgetLineResponse,
    DefaultPhasesRequest,
    MachineCreate,
    MachineListResponse,
    MachineResponse,
    MachineUpdate,
    ProjectPhaseCreate,
    ProjectPhaseResponse,
    ProjectPhaseUpdate,
    TimeTypeCreate,
    TimeTypeResponse,
)
from metallbau.services import master_data_service
from metallbau.services.errors import CostingError

router = APIRouter(prefix="/metallbau", tags=["Metallbau"])


def _company_id(request: Request) -> int:
    return int(request.state.company_id)


# ---------- Time types ----------

@router.get("/time-types", response_model=List[TimeTypeResponse])
def get_time_types(request: Request, _auth: tuple[str, int] = Depends(require_auth)):
    db = SessionLocal()
    try:
        return master_data_service.list_time_types(db, _company_id(request))
    finally:
        db.close()


@router.post("/time-types", response_model=TimeTypeResponse)
def create_time_type(
    payload: TimeTypeCreate,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        row = master_data_service.create_time_type(db, _company_id(request), **payload.model_dump())
        db.commit()
        return row
    except CostingError as exc:
        db.rollback()
        raise to_http(exc) from exc
    finally:
        db.close()


@router.post("/time-types/seed", response_model=List[TimeTypeResponse])
def seed_time_types(request: Request, _role=Depends(require_role(Role.MANAGER))):
    db = SessionLocal()
    try:
        rows = master_data_service.seed_default_time_types(db, _company_id(request))
        db.commit()
        return rows
    finally:
        db.close()


# ---------- Activity types ----------

@router.get("/activity-types", response_model=List[ActivityTypeResponse])
def get_activity_types(request: Request, _auth: tuple[str, int] = Depends(require_auth)):
    db = SessionLocal()
    try:
        return master_data_service.list_activity_types(db, _company_id(request))
    finally:
        db.close()


@router.post("/activity-types", response_model=ActivityTypeResponse)
def create_activity_type(
    payload: ActivityTypeCreate,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        row = master_data_service.create_activity_type(db, _company_id(request), **payload.model_dump())
        db.commit()
        return row
    except CostingError as exc:
        db.rollback()
        raise to_http(exc) from exc
    finally:
        db.close()


@router.post("/activity-types/seed", response_model=List[ActivityTypeResponse])
def seed_activity_types(request: Request, _role=Depends(require_role(Role.MANAGER))):
    db = SessionLocal()
    try:
        rows = master_data_service.seed_default_activity_types(db, _company_id(request))
        db.commit()
        return rows
    finally:
        db.close()


# ---------- Project phases ----------

@router.get("/projects/{project_id}/phases", response_model=List[ProjectPhaseResponse])
def get_project_phases(
    project_id: int,
    request: Request,
    _auth: tuple[str, int] = Depends(require_auth),
):
    db = SessionLocal()
    try:
        return master_data_service.list_project_phases(db, _company_id(request), project_id)
    except CostingError as exc:
        raise to_http(exc) from exc
    finally:
        db.close()


@router.post("/projects/{project_id}/phases", response_model=ProjectPhaseResponse)
def create_project_phase(
    project_id: int,
    payload: ProjectPhaseCreate,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        row = master_data_service.create_project_phase(
            db, _company_id(request), project_id, **payload.model_dump()
        )
        db.commit()
        return row
    except CostingError as exc:
        db.rollback()
        raise to_http(exc) from exc
    finally:
        db.close()


@router.post("/projects/{project_id}/phases/default", response_model=List[ProjectPhaseResponse])
def create_default_phases(
    project_id: int,
    payload: DefaultPhasesRequest,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        rows = master_data_service.create_default_phases(
            db, _company_id(request), project_id, payload.project_type
        )
        db.commit()
        return rows
    except CostingError as exc:
        db.rollback()
        raise to_http(exc) from exc
    finally:
        db.close()


@router.put("/phases/{phase_id}", response_model=ProjectPhaseResponse)
def update_project_phase(
    phase_id: int,
    payload: ProjectPhaseUpdate,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        row = master_data_service.update_project_phase(
            db, _company_id(request), phase_id, **payload.model_dump(exclude_unset=True)
        )
        db.commit()
        return row
    except CostingError as exc:
        db.rollback()
        raise to_http(exc) from exc
    finally:
        db.close()


# ---------- Machines ----------

@router.get("/machines", response_model=MachineListResponse)
def get_machines(
    request: Request,
    machine_type: Optional[str] = None,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    _auth: tuple[str, int] = Depends(require_auth),
):
    db = SessionLocal()
    try:
        return master_data_service.list_machines(
            db,
            _company_id(request),
            machine_type=machine_type,
            status=status,
            page=page,
            page_size=page_size,
        )
    finally:
        db.close()


@router.get("/machines/{machine_id}", response_model=MachineResponse)
def get_machine(
    machine_id: int,
    request: Request,
    _auth: tuple[str, int] = Depends(require_auth),
):
    db = SessionLocal()
    try:
        return master_data_service.get_machine(db, _company_id(request), machine_id)
    except CostingError as exc:
        raise to_http(exc) from exc
    finally:
        db.close()


@router.post("/machines", response_model=MachineResponse)
def create_machine(
    payload: MachineCreate,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        row = master_data_service.create_machine(db, _company_id(request), **payload.model_dump())
        db.commit()
        return row
    finally:
        db.close()


@router.put("/machines/{machine_id}", response_model=MachineResponse)
def update_machine(
    machine_id: int,
    payload: MachineUpdate,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        row = master_data_service.update_machine(
            db, _company_id(request), machine_id, **payload.model_dump(exclude_unset=True)
        )
        db.commit()
        return row
    except CostingError as exc:
        db.rollback()
        raise to_http(exc) from exc
    finally:
        db.close()


# ---------- Budget lines ----------

@router.get("/projects/{project_id}/budget-lines", response_model=List[BudgetLineResponse])
def get_budget_lines(
    project_id: int,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        return master_data_service.list_budget_lines(db, _company_id(request), project_id)
    except CostingError as exc:
        raise to_http(exc) from exc
    finally:
        db.close()


@router.post("/budget-lines", response_model=BudgetLineResponse)
def create_budget_line(
    payload: BudgetLineCreate,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        row = master_data_service.create_budget_line(db, _company_id(request), **payload.model_dump())
        db.commit()
        return row
    except CostingError as exc:
        db.rollback()
        raise to_http(exc) from exc
    finally:
        db.close()
