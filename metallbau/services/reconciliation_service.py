import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from metallbau.models.project import Project
from metallbau.models.project_cost_entry import ProjectCostEntry
from metallbau.services.errors import NotFoundError

logger = logging.getLogger(__name__)


def _ledger_total(db: Session, company_id: int, project_id: int) -> int:
    total = (
        db.query(func.coalesce(func.sum(ProjectCostEntry.amount_cents), 0))
        .filter(ProjectCostEntry.company_id == int(company_id))
        .filter(ProjectCostEntry.project_id == int(project_id))
        .scalar()
    )
    return int(total or 0)


def _get_project(db: Session, company_id: int, project_id: int) -> Project:
    project = (
        db.query(Project)
        .filter(Project.id == int(project_id), Project.company_id == int(company_id))
        .first()
    )
    if project is None:
        raise NotFoundError("Project not found")
    return project


def check_project_cost_total(*, company_id: int, project_id: int, db: Session) -> dict:
    """
    Invariant:
    projects.actual_cost_total_cents
    ==
    SUM(project_cost_entries.amount_cents) for the project.
    """
    project = _get_project(db, company_id, project_id)

    project_total = int(project.actual_cost_total_cents or 0)
    ledger_total = _ledger_total(db, company_id, project.id)

    return {
        "project_id": project.id,
        "project_total_cents": project_total,
        "ledger_total_cents": ledger_total,
        "delta_cents": project_total - ledger_total,
        "ok": project_total == ledger_total,
    }


def repair_project_cost_total(*, company_id: int, project_id: int, db: Session) -> dict:
    """
    Reset the denormalized project total to the ledger sum. The ledger is the
    source of truth. Caller owns the transaction.
    """
    before = check_project_cost_total(company_id=company_id, project_id=project_id, db=db)
    if before["ok"]:
        return {**before, "repaired": False}

    db.query(Project).filter(
        Project.id == int(project_id),
        Project.company_id == int(company_id),
    ).update(
        {Project.actual_cost_total_cents: before["ledger_total_cents"]},
        synchronize_session=False,
    )
    db.flush()

    logger.warning(
        "project cost total repaired from ledger",
        extra={
            "company_id": int(company_id),
            "project_id": int(project_id),
            "previous_total_cents": before["project_total_cents"],
            "ledger_total_cents": before["ledger_total_cents"],
        },
    )

    return {
        **before,
        "project_total_cents": before["ledger_total_cents"],
        "delta_cents": 0,
        "ok": True,
        "repaired": True,
    }
