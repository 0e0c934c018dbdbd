from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from metallbau.models.invoice import Invoice
from metallbau.models.project import Project
from metallbau.models.project_cost_entry import COST_TYPES, ProjectCostEntry
from metallbau.models.project_phase import ProjectPhase
from metallbau.services.errors import NotFoundError

logger = logging.getLogger(__name__)

STATUS_GREEN = "green"
STATUS_YELLOW = "yellow"
STATUS_RED = "red"

BUDGET_RED_PERCENT = Decimal(110)
BUDGET_YELLOW_PERCENT = Decimal(100)
MARGIN_RED_PERCENT = Decimal(5)
MARGIN_YELLOW_PERCENT = Decimal(10)


def _round_half_up(value: Decimal, places: str = "1") -> Decimal:
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


def _display_percent(value: Decimal) -> float:
    return float(_round_half_up(value, "0.1"))


def costs_by_type(db: Session, *, company_id: int, project_id: int) -> Dict[str, int]:
    rows = (
        db.query(
            ProjectCostEntry.cost_type.label("cost_type"),
            func.coalesce(func.sum(ProjectCostEntry.amount_cents), 0).label("amount_cents"),
        )
        .filter(ProjectCostEntry.company_id == int(company_id))
        .filter(ProjectCostEntry.project_id == int(project_id))
        .group_by(ProjectCostEntry.cost_type)
        .all()
    )

    totals = {cost_type: 0 for cost_type in COST_TYPES}
    for r in rows:
        totals[str(r.cost_type)] = int(r.amount_cents or 0)
    return totals


def classify(
    *,
    budget_used_percent: Decimal,
    revenue_total_cents: int,
    margin_percent: Decimal,
) -> Tuple[str, List[str]]:
    """
    Traffic light over budget use and margin.

    Budget is checked first; margin may only escalate the colour (a critical
    margin forces red, a low margin lifts green to yellow). Every triggered
    rule contributes a warning. Thresholds compare unrounded values.
    """
    status_color = STATUS_GREEN
    warnings: List[str] = []

    if budget_used_percent > BUDGET_RED_PERCENT:
        status_color = STATUS_RED
        warnings.append(f"Budget exceeded by {_round_half_up(budget_used_percent - 100)}%")
    elif budget_used_percent > BUDGET_YELLOW_PERCENT:
        status_color = STATUS_YELLOW
        warnings.append(f"Budget warning: {_round_half_up(budget_used_percent)}% used")

    if revenue_total_cents > 0 and margin_percent < MARGIN_RED_PERCENT:
        status_color = STATUS_RED
        warnings.append(f"Critical margin: {_round_half_up(margin_percent, '0.1')}%")
    elif revenue_total_cents > 0 and margin_percent < MARGIN_YELLOW_PERCENT:
        if status_color == STATUS_GREEN:
            status_color = STATUS_YELLOW
        warnings.append(f"Low margin: {_round_half_up(margin_percent, '0.1')}%")

    return status_color, warnings


def project_controlling(*, company_id: int, project_id: int, db: Session) -> Dict[str, Any]:
    """
    Read-only financial snapshot of one project, recomputed on every call.

    Actual cost comes from the cost ledger, not from the denormalized
    projects.actual_cost_total_cents; the two are compared and a mismatch is
    logged and reported as ledger_consistent=False.
    """
    project = (
        db.query(Project)
        .filter(Project.id == int(project_id), Project.company_id == int(company_id))
        .first()
    )
    if project is None:
        raise NotFoundError("Project not found")

    phases = (
        db.query(ProjectPhase)
        .filter(ProjectPhase.company_id == int(company_id), ProjectPhase.project_id == project.id)
        .order_by(ProjectPhase.sequence.asc(), ProjectPhase.id.asc())
        .all()
    )

    revenue_total_cents = int(
        db.query(func.coalesce(func.sum(Invoice.total_amount_cents), 0))
        .filter(Invoice.company_id == int(company_id))
        .filter(Invoice.project_id == project.id)
        .filter(Invoice.status != "CANCELLED")
        .scalar()
        or 0
    )

    costs = costs_by_type(db, company_id=company_id, project_id=project.id)
    actual_cost_total_cents = sum(costs.values())

    denormalized_total_cents = int(project.actual_cost_total_cents or 0)
    ledger_consistent = denormalized_total_cents == actual_cost_total_cents
    if not ledger_consistent:
        logger.warning(
            "project cost total diverges from ledger",
            extra={
                "company_id": int(company_id),
                "project_id": project.id,
                "ledger_total_cents": actual_cost_total_cents,
                "project_total_cents": denormalized_total_cents,
            },
        )

    budget_total_cents = int(project.budget_cents or 0)
    budget_remaining_cents = budget_total_cents - actual_cost_total_cents
    budget_used_percent = (
        Decimal(actual_cost_total_cents) / Decimal(budget_total_cents) * 100
        if budget_total_cents > 0
        else Decimal(0)
    )

    margin_cents = revenue_total_cents - actual_cost_total_cents
    margin_percent = (
        Decimal(margin_cents) / Decimal(revenue_total_cents) * 100
        if revenue_total_cents > 0
        else Decimal(0)
    )

    status_color, warnings = classify(
        budget_used_percent=budget_used_percent,
        revenue_total_cents=revenue_total_cents,
        margin_percent=margin_percent,
    )

    return {
        "project_id": project.id,
        "project_name": project.name,
        "project_number": project.number,
        "project_type": project.project_type,
        "status": project.status,
        "budget_total_cents": budget_total_cents,
        "actual_cost_total_cents": actual_cost_total_cents,
        "budget_remaining_cents": budget_remaining_cents,
        "budget_used_percent": _display_percent(budget_used_percent),
        "labor_costs_cents": costs["LABOR"],
        "machine_costs_cents": costs["MACHINE"],
        "material_costs_cents": costs["MATERIAL"],
        "external_costs_cents": costs["EXTERNAL"],
        "overhead_costs_cents": costs["OVERHEAD"],
        "revenue_total_cents": revenue_total_cents,
        "deckungsbeitrag_cents": margin_cents,
        "margin_cents": margin_cents,
        "margin_percent": _display_percent(margin_percent),
        "status_color": status_color,
        "warnings": warnings,
        "ledger_consistent": ledger_consistent,
        "phases": [
            {
                "id": p.id,
                "name": p.name,
                "phase_type": p.phase_type,
                "budget_amount_cents": int(p.budget_amount_cents or 0),
                "actual_amount_cents": int(p.actual_amount_cents or 0),
                "is_completed": bool(p.is_completed),
            }
            for p in phases
        ],
    }
