from datetime import date
from decimal import Decimal

import pytest

from metallbau.database import SessionLocal
from metallbau.models.project import Project
from metallbau.models.project_cost_entry import ProjectCostEntry
from metallbau.services.controlling_service import classify, project_controlling
from metallbau.services.errors import NotFoundError


def _post_cost(company_id: int, project_id: int, cost_type: str, amount_cents: int, source_id: int) -> None:
    db = SessionLocal()
    try:
        db.add(
            ProjectCostEntry(
                company_id=company_id,
                project_id=project_id,
                entry_date=date(2026, 5, 1),
                cost_type=cost_type,
                source_type="TEST",
                source_id=source_id,
                amount_cents=amount_cents,
                is_direct_cost=True,
            )
        )
        db.query(Project).filter(Project.id == project_id).update(
            {Project.actual_cost_total_cents: Project.actual_cost_total_cents + amount_cents},
            synchronize_session=False,
        )
        db.commit()
    finally:
        db.close()


def _controlling(company_id: int, project_id: int) -> dict:
    db = SessionLocal()
    try:
        return project_controlling(company_id=company_id, project_id=project_id, db=db)
    finally:
        db.close()


def test_budget_overrun_beyond_ten_percent_is_red(project_factory):
    project = project_factory(601, budget_cents=10000)
    _post_cost(601, project.id, "LABOR", 8000, 1)
    _post_cost(601, project.id, "MATERIAL", 3500, 2)

    result = _controlling(601, project.id)

    assert result["actual_cost_total_cents"] == 11500
    assert result["labor_costs_cents"] == 8000
    assert result["material_costs_cents"] == 3500
    assert result["machine_costs_cents"] == 0
    assert result["budget_remaining_cents"] == -1500
    assert result["budget_used_percent"] == 115.0
    assert result["status_color"] == "red"
    assert result["warnings"] == ["Budget exceeded by 15%"]
    assert result["ledger_consistent"] is True


def test_budget_slightly_over_is_yellow(project_factory):
    project = project_factory(602, budget_cents=10000)
    _post_cost(602, project.id, "MACHINE", 10500, 1)

    result = _controlling(602, project.id)

    assert result["status_color"] == "yellow"
    assert result["warnings"] == ["Budget warning: 105% used"]


def test_critical_margin_is_red(project_factory, invoice_factory):
    project = project_factory(603)
    invoice_factory(603, project.id, 10000)
    _post_cost(603, project.id, "LABOR", 9600, 1)

    result = _controlling(603, project.id)

    assert result["revenue_total_cents"] == 10000
    assert result["margin_cents"] == 400
    assert result["deckungsbeitrag_cents"] == 400
    assert result["margin_percent"] == 4.0
    assert result["status_color"] == "red"
    assert result["warnings"] == ["Critical margin: 4.0%"]


def test_low_margin_lifts_green_to_yellow(project_factory, invoice_factory):
    project = project_factory(604, budget_cents=100000)
    invoice_factory(604, project.id, 10000)
    _post_cost(604, project.id, "LABOR", 9250, 1)

    result = _controlling(604, project.id)

    assert result["status_color"] == "yellow"
    assert result["warnings"] == ["Low margin: 7.5%"]


def test_budget_and_margin_warnings_accumulate(project_factory, invoice_factory):
    project = project_factory(605, budget_cents=10000)
    invoice_factory(605, project.id, 10800)
    _post_cost(605, project.id, "LABOR", 10200, 1)

    result = _controlling(605, project.id)

    assert result["status_color"] == "yellow"
    assert result["warnings"] == ["Budget warning: 102% used", "Low margin: 5.6%"]


def test_cancelled_invoices_do_not_count_as_revenue(project_factory, invoice_factory):
    project = project_factory(606)
    invoice_factory(606, project.id, 50000, status="CANCELLED", number="RE-X")
    invoice_factory(606, project.id, 20000, number="RE-Y")

    result = _controlling(606, project.id)

    assert result["revenue_total_cents"] == 20000


def test_zero_budget_and_zero_revenue_is_green(project_factory):
    project = project_factory(607)
    _post_cost(607, project.id, "EXTERNAL", 5000, 1)

    result = _controlling(607, project.id)

    assert result["budget_used_percent"] == 0.0
    assert result["margin_percent"] == 0.0
    assert result["margin_cents"] == -5000
    assert result["status_color"] == "green"
    assert result["warnings"] == []


def test_phases_are_listed_in_sequence(project_factory, phase_factory):
    project = project_factory(608)
    phase_factory(608, project.id, name="Montage", phase_type="MONTAGE", sequence=2)
    phase_factory(608, project.id, name="Planung", phase_type="PLANUNG", sequence=1)

    result = _controlling(608, project.id)

    assert [p["name"] for p in result["phases"]] == ["Planung", "Montage"]


def test_drift_between_project_total_and_ledger_is_flagged(project_factory):
    project = project_factory(609, budget_cents=10000)
    _post_cost(609, project.id, "LABOR", 4000, 1)

    db = SessionLocal()
    try:
        db.query(Project).filter(Project.id == project.id).update({Project.actual_cost_total_cents: 1})
        db.commit()
    finally:
        db.close()

    result = _controlling(609, project.id)

    assert result["ledger_consistent"] is False
    assert result["actual_cost_total_cents"] == 4000


def test_unknown_project_is_not_found():
    with pytest.raises(NotFoundError):
        _controlling(610, 424242)


@pytest.mark.parametrize(
    "used, revenue, margin, expected_color",
    [
        ("110", 0, "0", "yellow"),
        ("110.01", 0, "0", "red"),
        ("100", 0, "0", "green"),
        ("50", 1000, "5", "yellow"),
        ("50", 1000, "10", "green"),
        ("50", 1000, "-20", "red"),
    ],
)
def test_classify_threshold_edges(used, revenue, margin, expected_color):
    color, _warnings = classify(
        budget_used_percent=Decimal(used),
        revenue_total_cents=revenue,
        margin_percent=Decimal(margin),
    )

    assert color == expected_color
