from datetime import date
from decimal import Decimal

import pytest

from metallbau.database import SessionLocal
from metallbau.models.product import Product
from metallbau.models.project import Project
from metallbau.models.project_cost_entry import ProjectCostEntry
from metallbau.services.cost_booking_service import book_material_consumption
from metallbau.services.errors import ForbiddenError, InvalidRequestError, NotFoundError


def _product_stock(product_id: int) -> Decimal:
    db = SessionLocal()
    try:
        return Decimal(db.query(Product).filter(Product.id == product_id).one().stock_quantity)
    finally:
        db.close()


def test_consumption_costs_at_purchase_price_and_draws_stock(project_factory, product_factory):
    company_id = 501
    project = project_factory(company_id)
    product = product_factory(company_id, purchase_price_cents=1250, stock_quantity="10")

    consumption = book_material_consumption(
        company_id,
        product_id=product.id,
        project_id=project.id,
        quantity=Decimal("4"),
        unit="m",
        consumption_date=date(2026, 4, 2),
    )

    assert consumption.unit_price_cents == 1250
    assert consumption.total_cost_cents == 5000
    assert _product_stock(product.id) == Decimal("6")

    db = SessionLocal()
    try:
        ledger = db.query(ProjectCostEntry).filter(ProjectCostEntry.project_id == project.id).one()
        total = db.query(Project).filter(Project.id == project.id).one().actual_cost_total_cents
    finally:
        db.close()

    assert ledger.cost_type == "MATERIAL"
    assert ledger.source_type == "MATERIAL_CONSUMPTION"
    assert ledger.source_id == consumption.id
    assert ledger.amount_cents == 5000
    assert total == 5000


def test_stock_may_go_negative(project_factory, product_factory):
    company_id = 502
    project = project_factory(company_id)
    product = product_factory(company_id, stock_quantity="3")

    book_material_consumption(
        company_id,
        product_id=product.id,
        project_id=project.id,
        quantity=Decimal("5"),
        unit="Stk",
    )

    assert _product_stock(product.id) == Decimal("-2")


def test_fractional_quantity_rounds_half_up(project_factory, product_factory):
    company_id = 503
    project = project_factory(company_id)
    product = product_factory(company_id, purchase_price_cents=333)

    consumption = book_material_consumption(
        company_id,
        product_id=product.id,
        project_id=project.id,
        quantity=Decimal("1.5"),
        unit="kg",
    )

    # 1.5 * 333 = 499.5
    assert consumption.total_cost_cents == 500


def test_closed_project_leaves_stock_untouched(project_factory, product_factory):
    company_id = 504
    project = project_factory(company_id, status="COMPLETED")
    product = product_factory(company_id, stock_quantity="10")

    with pytest.raises(ForbiddenError):
        book_material_consumption(
            company_id,
            product_id=product.id,
            project_id=project.id,
            quantity=Decimal("1"),
            unit="Stk",
        )

    assert _product_stock(product.id) == Decimal("10")


def test_missing_product_and_bad_quantity(project_factory):
    company_id = 505
    project = project_factory(company_id)

    with pytest.raises(NotFoundError):
        book_material_consumption(company_id, product_id=999999, project_id=project.id, quantity=1, unit="Stk")

    with pytest.raises(InvalidRequestError):
        book_material_consumption(company_id, product_id=999999, project_id=project.id, quantity=0, unit="Stk")
