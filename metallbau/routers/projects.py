from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError

from metallbau.core.authorization import Role, require_role
from metallbau.database import SessionLocal
from metallbau.deps.auth import require_auth
from metallbau.models.project import Project
from metallbau.schemas.project import ProjectCreate, ProjectResponse, ProjectStatusUpdate

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.post("", response_model=ProjectResponse)
def create_project(
    payload: ProjectCreate,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        row = Project(
            company_id=int(request.state.company_id),
            number=payload.number,
            name=payload.name,
            project_type=payload.project_type,
            status=payload.status,
            budget_cents=payload.budget_cents,
            actual_cost_total_cents=0,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail="Project number already exists") from exc
    finally:
        db.close()


@router.get("", response_model=List[ProjectResponse])
def list_projects(
    request: Request,
    _auth: tuple[str, int] = Depends(require_auth),
):
    db = SessionLocal()
    try:
        return (
            db.query(Project)
            .filter(Project.company_id == int(request.state.company_id))
            .order_by(Project.id.asc())
            .all()
        )
    finally:
        db.close()


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: int,
    request: Request,
    _auth: tuple[str, int] = Depends(require_auth),
):
    db = SessionLocal()
    try:
        row = (
            db.query(Project)
            .filter(
                Project.id == int(project_id),
                Project.company_id == int(request.state.company_id),
            )
            .first()
        )
        if row is None:
            raise HTTPException(status_code=404, detail="Project not found")
        return row
    finally:
        db.close()


@router.put("/{project_id}/status", response_model=ProjectResponse)
def update_project_status(
    project_id: int,
    payload: ProjectStatusUpdate,
    request: Request,
    _role=Depends(require_role(Role.MANAGER)),
):
    db = SessionLocal()
    try:
        row = (
            db.query(Project)
            .filter(
                Project.id == int(project_id),
                Project.company_id == int(request.state.company_id),
            )
            .first()
        )
        if row is None:
            raise HTTPException(status_code=404, detail="Project not found")
        row.status = payload.status
        db.commit()
        db.refresh(row)
        return row
    finally:
        db.close()
