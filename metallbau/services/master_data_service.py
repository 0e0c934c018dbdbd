from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from metallbau.models.activity_type import ActivityType
from metallbau.models.machine import Machine
from metallbau.models.project import Project
from metallbau.models.project_budget_line import ProjectBudgetLine
from metallbau.models.project_phase import ProjectPhase
from metallbau.models.time_type import TimeType
from metallbau.services.errors import ForbiddenError, InvalidRequestError, NotFoundError

DEFAULT_TIME_TYPES: List[Dict[str, Any]] = [
    {"code": "PROJECT", "name": "Projektzeit", "is_project_relevant": True, "is_billable": True, "sort_order": 1},
    {"code": "ORDER", "name": "Auftragszeit", "is_project_relevant": True, "is_billable": True, "sort_order": 2},
    {"code": "GENERAL", "name": "Allgemeine Tätigkeit", "is_project_relevant": False, "is_billable": False, "sort_order": 3},
    {"code": "ADMIN", "name": "Administration", "is_project_relevant": False, "is_billable": False, "sort_order": 4},
    {"code": "TRAINING", "name": "Weiterbildung", "is_project_relevant": False, "is_billable": False, "sort_order": 5},
    {
        "code": "ABSENCE",
        "name": "Abwesenheit",
        "is_project_relevant": False,
        "is_billable": False,
        "affects_capacity": False,
        "sort_order": 6,
    },
]

DEFAULT_ACTIVITY_TYPES: List[Dict[str, str]] = [
    {"code": "SCHNEIDEN", "name": "Schneiden (Laser, Plasma, Säge)", "category": "FERTIGUNG"},
    {"code": "BIEGEN", "name": "Biegen / Kanten", "category": "FERTIGUNG"},
    {"code": "SCHWEISSEN", "name": "Schweissen", "category": "FERTIGUNG"},
    {"code": "SCHLEIFEN", "name": "Schleifen / Entgraten", "category": "FERTIGUNG"},
    {"code": "BOHREN", "name": "Bohren / Fräsen", "category": "FERTIGUNG"},
    {"code": "CNC", "name": "CNC-Bearbeitung", "category": "FERTIGUNG"},
    {"code": "OBERFLAECHE", "name": "Oberflächenbehandlung", "category": "FERTIGUNG"},
    {"code": "QK", "name": "Qualitätskontrolle", "category": "FERTIGUNG"},
    {"code": "ANLIEFERUNG", "name": "Anlieferung / Abladen", "category": "MONTAGE"},
    {"code": "AUSRICHTEN", "name": "Ausrichten / Einmessen", "category": "MONTAGE"},
    {"code": "MONTAGE", "name": "Montage Konstruktion", "category": "MONTAGE"},
    {"code": "BEFESTIGUNG", "name": "Anschrauben / Dübeln", "category": "MONTAGE"},
    {"code": "SCHWEISSEN_BAUSTELLE", "name": "Schweissen vor Ort", "category": "MONTAGE"},
    {"code": "NACHARBEIT", "name": "Nacharbeit", "category": "MONTAGE"},
    {"code": "AUFMASS", "name": "Aufmass", "category": "PLANUNG"},
    {"code": "CAD", "name": "Konstruktion / CAD", "category": "PLANUNG"},
    {"code": "AV", "name": "Arbeitsvorbereitung", "category": "PLANUNG"},
    {"code": "DISPOSITION", "name": "Materialdisposition", "category": "PLANUNG"},
    {"code": "PL", "name": "Projektleitung", "category": "PLANUNG"},
]

DEFAULT_PHASES = {
    "WERKSTATT": [("Planung", "PLANUNG"), ("Fertigung", "FERTIGUNG"), ("Abschluss", "ABSCHLUSS")],
    "MONTAGE": [("Planung", "PLANUNG"), ("Montage", "MONTAGE"), ("Abschluss", "ABSCHLUSS")],
    "KOMBINIERT": [
        ("Planung", "PLANUNG"),
        ("Fertigung", "FERTIGUNG"),
        ("Montage", "MONTAGE"),
        ("Abschluss", "ABSCHLUSS"),
    ],
}


def get_project(db: Session, company_id: int, project_id: int) -> Project:
    project = (
        db.query(Project)
        .filter(Project.id == int(project_id), Project.company_id == int(company_id))
        .first()
    )
    if project is None:
        raise NotFoundError("Project not found")
    return project


# ---------- Time types ----------

def list_time_types(db: Session, company_id: int) -> List[TimeType]:
    return (
        db.query(TimeType)
        .filter(TimeType.company_id == int(company_id), TimeType.is_active.is_(True))
        .order_by(TimeType.sort_order.asc(), TimeType.id.asc())
        .all()
    )


def create_time_type(db: Session, company_id: int, **fields) -> TimeType:
    existing = (
        db.query(TimeType)
        .filter(TimeType.company_id == int(company_id), TimeType.code == fields["code"])
        .first()
    )
    if existing is not None:
        raise InvalidRequestError(f"TimeType {fields['code']} already exists")

    row = TimeType(company_id=int(company_id), **fields)
    db.add(row)
    db.flush()
    return row


def seed_default_time_types(db: Session, company_id: int) -> List[TimeType]:
    """Insert missing default time types; existing codes are left untouched."""
    existing = {
        code
        for (code,) in db.query(TimeType.code).filter(TimeType.company_id == int(company_id)).all()
    }
    for spec in DEFAULT_TIME_TYPES:
        if spec["code"] in existing:
            continue
        db.add(TimeType(company_id=int(company_id), **spec))
    db.flush()
    return list_time_types(db, company_id)


# ---------- Activity types ----------

def list_activity_types(db: Session, company_id: int) -> List[ActivityType]:
    return (
        db.query(ActivityType)
        .filter(ActivityType.company_id == int(company_id), ActivityType.is_active.is_(True))
        .order_by(ActivityType.name.asc())
        .all()
    )


def create_activity_type(db: Session, company_id: int, **fields) -> ActivityType:
    existing = (
        db.query(ActivityType)
        .filter(ActivityType.company_id == int(company_id), ActivityType.code == fields["code"])
        .first()
    )
    if existing is not None:
        raise InvalidRequestError(f"ActivityType {fields['code']} already exists")

    row = ActivityType(company_id=int(company_id), **fields)
    db.add(row)
    db.flush()
    return row


def seed_default_activity_types(db: Session, company_id: int) -> List[ActivityType]:
    existing = {
        code
        for (code,) in db.query(ActivityType.code).filter(ActivityType.company_id == int(company_id)).all()
    }
    for spec in DEFAULT_ACTIVITY_TYPES:
        if spec["code"] in existing:
            continue
        db.add(ActivityType(company_id=int(company_id), **spec))
    db.flush()
    return list_activity_types(db, company_id)


# ---------- Project phases ----------

def list_project_phases(db: Session, company_id: int, project_id: int) -> List[ProjectPhase]:
    project = get_project(db, company_id, project_id)
    return (
        db.query(ProjectPhase)
        .filter(ProjectPhase.company_id == int(company_id), ProjectPhase.project_id == project.id)
        .order_by(ProjectPhase.sequence.asc(), ProjectPhase.id.asc())
        .all()
    )


def create_project_phase(
    db: Session,
    company_id: int,
    project_id: int,
    *,
    name: str,
    phase_type: str,
    sequence: Optional[int] = None,
    budget_amount_cents: Optional[int] = None,
    planned_start: Optional[date] = None,
    planned_end: Optional[date] = None,
) -> ProjectPhase:
    project = get_project(db, company_id, project_id)
    if project.is_closed:
        raise ForbiddenError("Cannot add phases to closed project")

    row = ProjectPhase(
        company_id=int(company_id),
        project_id=project.id,
        name=name,
        phase_type=phase_type,
        sequence=sequence or 1,
        budget_amount_cents=budget_amount_cents or 0,
        planned_start=planned_start,
        planned_end=planned_end,
    )
    db.add(row)
    db.flush()
    return row


def update_project_phase(db: Session, company_id: int, phase_id: int, **changes) -> ProjectPhase:
    phase = (
        db.query(ProjectPhase)
        .filter(ProjectPhase.id == int(phase_id), ProjectPhase.company_id == int(company_id))
        .first()
    )
    if phase is None:
        raise NotFoundError("Phase not found")

    for key in ("name", "budget_amount_cents", "planned_start", "planned_end"):
        if changes.get(key) is not None:
            setattr(phase, key, changes[key])

    is_completed = changes.get("is_completed")
    if is_completed is not None:
        phase.is_completed = bool(is_completed)
        if is_completed:
            phase.completed_at = datetime.utcnow()

    db.flush()
    return phase


def create_default_phases(db: Session, company_id: int, project_id: int, project_type: str) -> List[ProjectPhase]:
    phases = DEFAULT_PHASES.get(project_type, DEFAULT_PHASES["KOMBINIERT"])
    for sequence, (name, phase_type) in enumerate(phases, start=1):
        create_project_phase(
            db,
            company_id,
            project_id,
            name=name,
            phase_type=phase_type,
            sequence=sequence,
        )
    return list_project_phases(db, company_id, project_id)


# ---------- Machines ----------

def list_machines(
    db: Session,
    company_id: int,
    *,
    machine_type: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    page_size: int = 50,
) -> Dict[str, Any]:
    q = db.query(Machine).filter(Machine.company_id == int(company_id))
    if machine_type is not None:
        q = q.filter(Machine.machine_type == str(machine_type))
    if status is not None:
        q = q.filter(Machine.status == str(status))

    total = q.count()
    rows = (
        q.order_by(Machine.name.asc(), Machine.id.asc())
        .offset((int(page) - 1) * int(page_size))
        .limit(int(page_size))
        .all()
    )
    return {"page": int(page), "page_size": int(page_size), "total": int(total), "rows": rows}


def get_machine(db: Session, company_id: int, machine_id: int) -> Machine:
    machine = (
        db.query(Machine)
        .filter(Machine.id == int(machine_id), Machine.company_id == int(company_id))
        .first()
    )
    if machine is None:
        raise NotFoundError("Machine not found")
    return machine


def create_machine(db: Session, company_id: int, **fields) -> Machine:
    fields.setdefault("machine_type", "SONSTIGE")
    # Book value starts at the purchase value
    fields["current_book_value_cents"] = fields.get("purchase_value_cents")
    row = Machine(company_id=int(company_id), status="ACTIVE", **fields)
    db.add(row)
    db.flush()
    return row


def update_machine(db: Session, company_id: int, machine_id: int, **changes) -> Machine:
    machine = get_machine(db, company_id, machine_id)
    for key, value in changes.items():
        if value is not None:
            setattr(machine, key, value)
    db.flush()
    return machine


# ---------- Budget lines ----------

def create_budget_line(
    db: Session,
    company_id: int,
    *,
    project_id: int,
    cost_type: str,
    description: str,
    planned_quantity: Decimal,
    planned_unit_price_cents: int,
    project_phase_id: Optional[int] = None,
) -> ProjectBudgetLine:
    project = get_project(db, company_id, project_id)

    if project_phase_id is not None:
        phase = (
            db.query(ProjectPhase)
            .filter(
                ProjectPhase.id == int(project_phase_id),
                ProjectPhase.company_id == int(company_id),
                ProjectPhase.project_id == project.id,
            )
            .first()
        )
        if phase is None:
            raise NotFoundError("Project phase not found")

    quantity = Decimal(str(planned_quantity))
    planned_total_cents = int((quantity * int(planned_unit_price_cents)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    row = ProjectBudgetLine(
        company_id=int(company_id),
        project_id=project.id,
        project_phase_id=project_phase_id,
        cost_type=cost_type,
        description=description,
        planned_quantity=quantity,
        planned_unit_price_cents=int(planned_unit_price_cents),
        planned_total_cents=planned_total_cents,
    )
    db.add(row)
    db.flush()
    return row


def list_budget_lines(db: Session, company_id: int, project_id: int) -> List[ProjectBudgetLine]:
    project = get_project(db, company_id, project_id)
    return (
        db.query(ProjectBudgetLine)
        .filter(ProjectBudgetLine.company_id == int(company_id), ProjectBudgetLine.project_id == project.id)
        .order_by(ProjectBudgetLine.cost_type.asc(), ProjectBudgetLine.description.asc())
        .all()
    )
