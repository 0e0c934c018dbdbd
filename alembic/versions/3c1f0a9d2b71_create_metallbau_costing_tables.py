"""create metallbau costing tables

Revision ID: 3c1f0a9d2b71
Revises:
Create Date: 2026-09-28 09:14:02.118734

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b71'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_and_company() -> list:
    return [
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
    ]


def _index_id_and_company(table_name: str) -> None:
    op.create_index(f"ix_{table_name}_id", table_name, ["id"], unique=False)
    op.create_index(f"ix_{table_name}_company_id", table_name, ["company_id"], unique=False)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "projects",
        *_id_and_company(),
        sa.Column("number", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("project_type", sa.String(), nullable=False, server_default="KOMBINIERT"),
        sa.Column("status", sa.String(), nullable=False, server_default="ACTIVE"),
        sa.Column("budget_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("actual_cost_total_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("company_id", "number", name="uq_projects_company_number"),
        sa.CheckConstraint("budget_cents >= 0", name="ck_projects_budget_cents_nonnegative"),
    )
    _index_id_and_company("projects")
    op.create_index("ix_projects_status", "projects", ["status"], unique=False)

    op.create_table(
        "project_phases",
        *_id_and_company(),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("phase_type", sa.String(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("budget_amount_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("actual_amount_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("planned_start", sa.Date(), nullable=True),
        sa.Column("planned_end", sa.Date(), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="RESTRICT"),
    )
    _index_id_and_company("project_phases")
    op.create_index("ix_project_phases_project_id", "project_phases", ["project_id"], unique=False)

    op.create_table(
        "project_budget_lines",
        *_id_and_company(),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("project_phase_id", sa.Integer(), nullable=True),
        sa.Column("cost_type", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("planned_quantity", sa.Numeric(14, 4), nullable=False),
        sa.Column("planned_unit_price_cents", sa.BigInteger(), nullable=False),
        sa.Column("planned_total_cents", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["project_phase_id"], ["project_phases.id"]),
    )
    _index_id_and_company("project_budget_lines")
    op.create_index("ix_project_budget_lines_project_id", "project_budget_lines", ["project_id"], unique=False)
    op.create_index(
        "ix_project_budget_lines_project_phase_id", "project_budget_lines", ["project_phase_id"], unique=False
    )

    op.create_table(
        "time_types",
        *_id_and_company(),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("is_project_relevant", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_billable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("affects_capacity", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("company_id", "code", name="uq_time_types_company_code"),
    )
    _index_id_and_company("time_types")

    op.create_table(
        "activity_types",
        *_id_and_company(),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("company_id", "code", name="uq_activity_types_company_code"),
    )
    _index_id_and_company("activity_types")

    op.create_table(
        "machines",
        *_id_and_company(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("machine_type", sa.String(), nullable=False, server_default="SONSTIGE"),
        sa.Column("status", sa.String(), nullable=False, server_default="ACTIVE"),
        sa.Column("cost_center_id", sa.Integer(), nullable=True),
        sa.Column("hourly_rate_cents", sa.BigInteger(), nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        sa.Column("purchase_value_cents", sa.BigInteger(), nullable=True),
        sa.Column("current_book_value_cents", sa.BigInteger(), nullable=True),
        sa.Column("useful_life_years", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("hourly_rate_cents >= 0", name="ck_machines_hourly_rate_nonnegative"),
    )
    _index_id_and_company("machines")
    op.create_index("ix_machines_status", "machines", ["status"], unique=False)

    op.create_table(
        "products",
        *_id_and_company(),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("sku", sa.String(), nullable=True),
        sa.Column("unit", sa.String(), nullable=False, server_default="Stk"),
        sa.Column("purchase_price_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("stock_quantity", sa.Numeric(14, 4), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    _index_id_and_company("products")

    op.create_table(
        "invoices",
        *_id_and_company(),
        sa.Column("project_id", sa.Integer(), nullable=True),
        sa.Column("number", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="DRAFT"),
        sa.Column("total_amount_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("paid_amount_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
    )
    _index_id_and_company("invoices")
    op.create_index("ix_invoices_project_id", "invoices", ["project_id"], unique=False)

    op.create_table(
        "time_entries",
        *_id_and_company(),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("time_type_id", sa.Integer(), nullable=False),
        sa.Column("activity_type_id", sa.Integer(), nullable=True),
        sa.Column("cost_center_id", sa.Integer(), nullable=True),
        sa.Column("project_id", sa.Integer(), nullable=True),
        sa.Column("project_phase_id", sa.Integer(), nullable=True),
        sa.Column("machine_id", sa.Integer(), nullable=True),
        sa.Column("work_location", sa.String(), nullable=False, server_default="WERKSTATT"),
        sa.Column("base_hourly_rate_cents", sa.BigInteger(), nullable=False),
        sa.Column("surcharge_total_cents", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("effective_hourly_rate_cents", sa.BigInteger(), nullable=False),
        sa.Column("total_cost_cents", sa.BigInteger(), nullable=False),
        sa.Column("is_billable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["time_type_id"], ["time_types.id"]),
        sa.ForeignKeyConstraint(["activity_type_id"], ["activity_types.id"]),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.ForeignKeyConstraint(["project_phase_id"], ["project_phases.id"]),
        sa.ForeignKeyConstraint(["machine_id"], ["machines.id"]),
        sa.CheckConstraint("duration_minutes > 0", name="ck_time_entries_duration_positive"),
    )
    _index_id_and_company("time_entries")
    op.create_index("ix_time_entries_user_id", "time_entries", ["user_id"], unique=False)
    op.create_index("ix_time_entries_date", "time_entries", ["date"], unique=False)
    op.create_index("ix_time_entries_time_type_id", "time_entries", ["time_type_id"], unique=False)
    op.create_index("ix_time_entries_project_id", "time_entries", ["project_id"], unique=False)
    op.create_index("ix_time_entries_project_phase_id", "time_entries", ["project_phase_id"], unique=False)

    op.create_table(
        "time_entry_surcharges",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("time_entry_id", sa.Integer(), nullable=False),
        sa.Column("surcharge_type", sa.String(), nullable=False),
        sa.Column("surcharge_percent", sa.Numeric(6, 2), nullable=True),
        sa.Column("surcharge_amount_cents", sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(["time_entry_id"], ["time_entries.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_time_entry_surcharges_id", "time_entry_surcharges", ["id"], unique=False)
    op.create_index(
        "ix_time_entry_surcharges_time_entry_id", "time_entry_surcharges", ["time_entry_id"], unique=False
    )

    op.create_table(
        "machine_bookings",
        *_id_and_company(),
        sa.Column("machine_id", sa.Integer(), nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("project_phase_id", sa.Integer(), nullable=True),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("duration_hours", sa.Numeric(10, 2), nullable=False),
        sa.Column("hourly_rate_cents", sa.BigInteger(), nullable=False),
        sa.Column("total_cost_cents", sa.BigInteger(), nullable=False),
        sa.Column("operator_id", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["machine_id"], ["machines.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["project_phase_id"], ["project_phases.id"]),
    )
    _index_id_and_company("machine_bookings")
    op.create_index("ix_machine_bookings_machine_id", "machine_bookings", ["machine_id"], unique=False)
    op.create_index("ix_machine_bookings_project_id", "machine_bookings", ["project_id"], unique=False)

    op.create_table(
        "material_consumptions",
        *_id_and_company(),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("project_phase_id", sa.Integer(), nullable=True),
        sa.Column("consumption_date", sa.Date(), nullable=False),
        sa.Column("quantity", sa.Numeric(14, 4), nullable=False),
        sa.Column("unit", sa.String(), nullable=False),
        sa.Column("unit_price_cents", sa.BigInteger(), nullable=False),
        sa.Column("total_cost_cents", sa.BigInteger(), nullable=False),
        sa.Column("consumption_type", sa.String(), nullable=False, server_default="PRODUCTION"),
        sa.Column("scrap_quantity", sa.Numeric(14, 4), nullable=False, server_default="0"),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["project_phase_id"], ["project_phases.id"]),
    )
    _index_id_and_company("material_consumptions")
    op.create_index("ix_material_consumptions_product_id", "material_consumptions", ["product_id"], unique=False)
    op.create_index("ix_material_consumptions_project_id", "material_consumptions", ["project_id"], unique=False)

    op.create_table(
        "project_cost_entries",
        *_id_and_company(),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("project_phase_id", sa.Integer(), nullable=True),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("cost_type", sa.String(), nullable=False),
        sa.Column("source_type", sa.String(), nullable=False),
        sa.Column("source_id", sa.Integer(), nullable=False),
        sa.Column("amount_cents", sa.BigInteger(), nullable=False),
        sa.Column("is_direct_cost", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["project_phase_id"], ["project_phases.id"]),
        sa.UniqueConstraint("company_id", "source_type", "source_id", name="uq_project_cost_entries_source"),
    )
    _index_id_and_company("project_cost_entries")
    op.create_index("ix_project_cost_entries_project_id", "project_cost_entries", ["project_id"], unique=False)
    op.create_index(
        "ix_project_cost_entries_project_phase_id", "project_cost_entries", ["project_phase_id"], unique=False
    )
    op.create_index("ix_project_cost_entries_entry_date", "project_cost_entries", ["entry_date"], unique=False)
    op.create_index("ix_project_cost_entries_cost_type", "project_cost_entries", ["cost_type"], unique=False)
    op.create_index(
        "ix_project_cost_entries_company_project_type",
        "project_cost_entries",
        ["company_id", "project_id", "cost_type"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    for table_name in (
        "project_cost_entries",
        "material_consumptions",
        "machine_bookings",
        "time_entry_surcharges",
        "time_entries",
        "invoices",
        "products",
        "machines",
        "activity_types",
        "time_types",
        "project_budget_lines",
        "project_phases",
        "projects",
    ):
        op.drop_table(table_name)
