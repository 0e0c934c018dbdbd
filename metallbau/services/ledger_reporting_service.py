from __future__ import annotations

from datetime import date
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from metallbau.models.project_cost_entry import ProjectCostEntry


def _filtered(
    db: Session,
    *,
    company_id: int,
    project_id: Optional[int],
    cost_type: Optional[str],
    date_start: Optional[date],
    date_end: Optional[date],
):
    q = db.query(ProjectCostEntry).filter(ProjectCostEntry.company_id == int(company_id))

    if project_id is not None:
        q = q.filter(ProjectCostEntry.project_id == int(project_id))
    if cost_type is not None:
        q = q.filter(ProjectCostEntry.cost_type == str(cost_type))
    # Date range only applies when both ends are given
    if date_start is not None and date_end is not None:
        q = q.filter(ProjectCostEntry.entry_date >= date_start)
        q = q.filter(ProjectCostEntry.entry_date <= date_end)
    return q


def list_cost_entries(
    *,
    company_id: int,
    db: Session,
    project_id: Optional[int] = None,
    cost_type: Optional[str] = None,
    date_start: Optional[date] = None,
    date_end: Optional[date] = None,
    page: int = 1,
    page_size: int = 100,
) -> dict[str, Any]:
    """
    Paginated read of the cost ledger, newest entry_date first.

    date_start/date_end are inclusive.
    """
    q = _filtered(
        db,
        company_id=company_id,
        project_id=project_id,
        cost_type=cost_type,
        date_start=date_start,
        date_end=date_end,
    )

    total = q.count()
    rows = (
        q.order_by(ProjectCostEntry.entry_date.desc(), ProjectCostEntry.id.desc())
        .offset((int(page) - 1) * int(page_size))
        .limit(int(page_size))
        .all()
    )

    return {
        "page": int(page),
        "page_size": int(page_size),
        "total": int(total),
        "total_pages": (int(total) + int(page_size) - 1) // int(page_size),
        "rows": [
            {
                "id": r.id,
                "project_id": r.project_id,
                "project_phase_id": r.project_phase_id,
                "entry_date": r.entry_date.isoformat(),
                "cost_type": r.cost_type,
                "source_type": r.source_type,
                "source_id": r.source_id,
                "amount_cents": int(r.amount_cents),
                "is_direct_cost": bool(r.is_direct_cost),
                "description": r.description,
            }
            for r in rows
        ],
    }


def cost_totals(
    *,
    company_id: int,
    db: Session,
    date_start: date,
    date_end: date,
    project_id: Optional[int] = None,
    cost_type: Optional[str] = None,
) -> dict[str, Any]:
    """
    Read-only reporting query.

    Semantics:
      entry_date >= date_start AND entry_date <= date_end
    Grouping:
      project_id, cost_type
    """
    q = (
        db.query(
            ProjectCostEntry.project_id.label("project_id"),
            ProjectCostEntry.cost_type.label("cost_type"),
            func.count(ProjectCostEntry.id).label("row_count"),
            func.coalesce(func.sum(ProjectCostEntry.amount_cents), 0).label("amount_cents"),
        )
        .filter(ProjectCostEntry.company_id == int(company_id))
        .filter(ProjectCostEntry.entry_date >= date_start)
        .filter(ProjectCostEntry.entry_date <= date_end)
    )

    if project_id is not None:
        q = q.filter(ProjectCostEntry.project_id == int(project_id))
    if cost_type is not None:
        q = q.filter(ProjectCostEntry.cost_type == str(cost_type))

    rows = (
        q.group_by(ProjectCostEntry.project_id, ProjectCostEntry.cost_type)
        .order_by(ProjectCostEntry.project_id.asc(), ProjectCostEntry.cost_type.asc())
        .all()
    )

    return {
        "company_id": int(company_id),
        "date_start": date_start.isoformat(),
        "date_end": date_end.isoformat(),
        "filters": {
            "project_id": project_id,
            "cost_type": cost_type,
        },
        "groups": [
            {
                "project_id": int(r.project_id),
                "cost_type": str(r.cost_type),
                "row_count": int(r.row_count),
                "amount_cents": int(r.amount_cents),
            }
            for r in rows
        ],
    }
