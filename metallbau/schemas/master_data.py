from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

TimeTypeCode = Literal["PROJECT", "ORDER", "GENERAL", "ADMIN", "TRAINING", "ABSENCE"]
PhaseType = Literal["PLANUNG", "FERTIGUNG", "MONTAGE", "ABSCHLUSS"]
CostType = Literal["LABOR", "MACHINE", "MATERIAL", "EXTERNAL", "OVERHEAD"]
MachineType = Literal[
    "LASER", "PLASMA", "PRESSE", "CNC", "SAEGE", "BIEGE", "SCHWEISS", "BOHR", "FRAES", "SCHLEIF", "SONSTIGE"
]
MachineStatus = Literal["ACTIVE", "MAINTENANCE", "RETIRED"]


class TimeTypeCreate(BaseModel):
    code: TimeTypeCode
    name: str
    description: Optional[str] = None
    is_project_relevant: bool = False
    is_billable: bool = False
    affects_capacity: bool = True
    sort_order: int = 0


class TimeTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    code: str
    name: str
    description: Optional[str]
    is_project_relevant: bool
    is_billable: bool
    affects_capacity: bool
    sort_order: int


class ActivityTypeCreate(BaseModel):
    code: str
    name: str
    category: Optional[str] = None
    description: Optional[str] = None


class ActivityTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    code: str
    name: str
    category: Optional[str]
    description: Optional[str]


class ProjectPhaseCreate(BaseModel):
    name: str
    phase_type: PhaseType
    sequence: Optional[int] = Field(default=None, ge=1)
    budget_amount_cents: Optional[int] = Field(default=None, ge=0)
    planned_start: Optional[date] = None
    planned_end: Optional[date] = None


class ProjectPhaseUpdate(BaseModel):
    name: Optional[str] = None
    budget_amount_cents: Optional[int] = Field(default=None, ge=0)
    planned_start: Optional[date] = None
    planned_end: Optional[date] = None
    is_completed: Optional[bool] = None


class DefaultPhasesRequest(BaseModel):
    project_type: Literal["WERKSTATT", "MONTAGE", "KOMBINIERT"]


class ProjectPhaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    name: str
    phase_type: str
    sequence: int
    budget_amount_cents: int
    actual_amount_cents: int
    planned_start: Optional[date]
    planned_end: Optional[date]
    is_completed: bool
    completed_at: Optional[datetime]


class MachineCreate(BaseModel):
    name: str
    machine_type: MachineType = "SONSTIGE"
    cost_center_id: Optional[int] = None
    hourly_rate_cents: int = Field(ge=0)
    purchase_date: Optional[date] = None
    purchase_value_cents: Optional[int] = Field(default=None, ge=0)
    useful_life_years: Optional[int] = None
    notes: Optional[str] = None


class MachineUpdate(BaseModel):
    name: Optional[str] = None
    machine_type: Optional[MachineType] = None
    hourly_rate_cents: Optional[int] = Field(default=None, ge=0)
    status: Optional[MachineStatus] = None
    current_book_value_cents: Optional[int] = None
    notes: Optional[str] = None


class MachineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    name: str
    machine_type: str
    status: str
    cost_center_id: Optional[int]
    hourly_rate_cents: int
    purchase_date: Optional[date]
    purchase_value_cents: Optional[int]
    current_book_value_cents: Optional[int]
    useful_life_years: Optional[int]
    notes: Optional[str]


class MachineListResponse(BaseModel):
    page: int
    page_size: int
    total: int
    rows: list[MachineResponse]


class BudgetLineCreate(BaseModel):
    project_id: int
    project_phase_id: Optional[int] = None
    cost_type: CostType
    description: str
    planned_quantity: Decimal = Field(ge=0)
    planned_unit_price_cents: int = Field(ge=0)


class BudgetLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    project_phase_id: Optional[int]
    cost_type: str
    description: str
    planned_quantity: Decimal
    planned_unit_price_cents: int
    planned_total_cents: int
