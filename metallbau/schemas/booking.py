import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from metallbau.core.rates import SurchargeType

WorkLocation = Literal["WERKSTATT", "BAUSTELLE"]
ConsumptionType = Literal["PRODUCTION", "SCRAP", "RETURN"]


class LaborBookingCreate(BaseModel):
    date: datetime.date
    duration_minutes: int = Field(ge=1, description="Duration in minutes")
    time_type_code: str
    project_id: Optional[int] = None
    project_phase_id: Optional[int] = None
    activity_type_id: Optional[int] = None
    cost_center_id: Optional[int] = None
    machine_id: Optional[int] = None
    work_location: WorkLocation = "WERKSTATT"
    surcharges: List[SurchargeType] = Field(default_factory=list)
    base_hourly_rate_cents: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None


class TimeEntrySurchargeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    surcharge_type: str
    surcharge_percent: Optional[Decimal]
    surcharge_amount_cents: Optional[int]


class TimeEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    user_id: str
    date: datetime.date
    duration_minutes: int
    time_type_id: int
    project_id: Optional[int]
    project_phase_id: Optional[int]
    work_location: str
    base_hourly_rate_cents: int
    surcharge_total_cents: int
    effective_hourly_rate_cents: int
    total_cost_cents: int
    is_billable: bool
    description: Optional[str]
    surcharges: List[TimeEntrySurchargeResponse]


class MachineBookingCreate(BaseModel):
    machine_id: int
    project_id: int
    project_phase_id: Optional[int] = None
    booking_date: Optional[datetime.date] = None
    duration_hours: Decimal = Field(gt=0, description="Duration in hours")
    operator_id: Optional[str] = None
    description: Optional[str] = None


class MachineBookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    machine_id: int
    project_id: int
    project_phase_id: Optional[int]
    booking_date: datetime.date
    duration_hours: Decimal
    hourly_rate_cents: int
    total_cost_cents: int
    operator_id: Optional[str]
    description: Optional[str]


class MaterialConsumptionCreate(BaseModel):
    product_id: int
    project_id: int
    project_phase_id: Optional[int] = None
    consumption_date: Optional[datetime.date] = None
    quantity: Decimal = Field(gt=0)
    unit: str
    consumption_type: ConsumptionType = "PRODUCTION"
    scrap_quantity: Decimal = Decimal(0)
    description: Optional[str] = None


class MaterialConsumptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    product_id: int
    project_id: int
    project_phase_id: Optional[int]
    consumption_date: datetime.date
    quantity: Decimal
    unit: str
    unit_price_cents: int
    total_cost_cents: int
    consumption_type: str
    scrap_quantity: Decimal
    description: Optional[str]
