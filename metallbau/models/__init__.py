from metallbau.models.activity_type import ActivityType
from metallbau.models.invoice import Invoice
from metallbau.models.machine import Machine
from metallbau.models.machine_booking import MachineBooking
from metallbau.models.material_consumption import MaterialConsumption
from metallbau.models.product import Product
from metallbau.models.project import Project
from metallbau.models.project_budget_line import ProjectBudgetLine
from metallbau.models.project_cost_entry import ProjectCostEntry
from metallbau.models.project_phase import ProjectPhase
from metallbau.models.time_entry import TimeEntry, TimeEntrySurcharge
from metallbau.models.time_type import TimeType

__all__ = [
    "ActivityType",
    "Invoice",
    "Machine",
    "MachineBooking",
    "MaterialConsumption",
    "Product",
    "Project",
    "ProjectBudgetLine",
    "ProjectCostEntry",
    "ProjectPhase",
    "TimeEntry",
    "TimeEntrySurcharge",
    "TimeType",
]
