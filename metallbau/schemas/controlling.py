from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel


class PhaseSnapshot(BaseModel):
    id: int
    name: str
    phase_type: str
    budget_amount_cents: int
    actual_amount_cents: int
    is_completed: bool


class ProjectControllingResponse(BaseModel):
    project_id: int
    project_name: str
    project_number: str
    project_type: str
    status: str

    budget_total_cents: int
    actual_cost_total_cents: int
    budget_remaining_cents: int
    budget_used_percent: float

    labor_costs_cents: int
    machine_costs_cents: int
    material_costs_cents: int
    external_costs_cents: int
    overhead_costs_cents: int

    revenue_total_cents: int
    deckungsbeitrag_cents: int
    margin_cents: int
    margin_percent: float

    status_color: Literal["green", "yellow", "red"]
    warnings: List[str]
    ledger_consistent: bool

    phases: List[PhaseSnapshot]


class CostEntryRow(BaseModel):
    id: int
    project_id: int
    project_phase_id: Optional[int]
    entry_date: str
    cost_type: str
    source_type: str
    source_id: int
    amount_cents: int
    is_direct_cost: bool
    description: Optional[str]


class CostEntryPage(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int
    rows: List[CostEntryRow]


class CostTotalsGroup(BaseModel):
    project_id: int
    cost_type: str
    row_count: int
    amount_cents: int


class CostTotalsResponse(BaseModel):
    company_id: int
    date_start: str
    date_end: str
    filters: Dict[str, Any]
    groups: List[CostTotalsGroup]


class ReconciliationResponse(BaseModel):
    project_id: int
    project_total_cents: int
    ledger_total_cents: int
    delta_cents: int
    ok: bool
    repaired: Optional[bool] = None
