from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ProjectType = Literal["WERKSTATT", "MONTAGE", "KOMBINIERT"]
ProjectStatus = Literal["PLANNED", "ACTIVE", "ON_HOLD", "COMPLETED", "CANCELLED"]


class ProjectCreate(BaseModel):
    number: str
    name: str
    project_type: ProjectType = "KOMBINIERT"
    status: ProjectStatus = "ACTIVE"
    budget_cents: int = Field(default=0, ge=0)


class ProjectStatusUpdate(BaseModel):
    status: ProjectStatus


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    number: str
    name: str
    project_type: str
    status: str
    budget_cents: int
    actual_cost_total_cents: int
    created_at: datetime
