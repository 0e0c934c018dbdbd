import os
import tempfile

_default_test_secret = "test-jwt-secret-for-pytest-only-0000000000000000"
if len(os.environ.get("JWT_SECRET", "")) < 32:
    os.environ["JWT_SECRET"] = _default_test_secret
os.environ.setdefault("ENV", "test")

import subprocess
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url

_SQLITE_PATH = Path(tempfile.gettempdir()) / "metallbau_pytest.db"
TEST_DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{_SQLITE_PATH}")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from metallbau import database  # noqa: E402
from metallbau.models import Invoice, Machine, Product, Project, ProjectPhase, TimeType  # noqa: E402
from metallbau.services.master_data_service import DEFAULT_TIME_TYPES  # noqa: E402


def _is_postgres(database_url: str) -> bool:
    return make_url(database_url).drivername.startswith("postgresql")


def _ensure_database_exists(database_url: str) -> None:
    url = make_url(database_url)

    if not url.drivername.startswith("postgresql"):
        if url.database and os.path.exists(url.database):
            os.remove(url.database)
        return

    db_name = url.database
    admin_url = url.set(database="postgres")
    admin_engine = create_engine(admin_url, isolation_level="AUTOCOMMIT")

    try:
        with admin_engine.connect() as conn:
            exists = conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :name"),
                {"name": db_name},
            ).scalar()
            if not exists:
                safe_db_name = db_name.replace('"', '""')
                conn.execute(text(f'CREATE DATABASE "{safe_db_name}"'))
    finally:
        admin_engine.dispose()


@pytest.fixture(scope="session", autouse=True)
def _prepare_test_database() -> None:
    _ensure_database_exists(TEST_DATABASE_URL)

    env = os.environ.copy()
    env["DATABASE_URL"] = TEST_DATABASE_URL

    subprocess.run(
        ["alembic", "upgrade", "head"],
        check=True,
        cwd=Path(__file__).resolve().parents[2],
        env=env,
    )

    database.configure_database()


def _wipe_tables() -> None:
    with database.engine.begin() as conn:
        if _is_postgres(TEST_DATABASE_URL):
            rows = conn.execute(
                text(
                    """
                    SELECT tablename
                    FROM pg_tables
                    WHERE schemaname = 'public'
                      AND tablename <> 'alembic_version'
                    """
                )
            ).fetchall()

            table_names = [row[0] for row in rows]
            if table_names:
                quoted = ", ".join([f'"public"."{name}"' for name in table_names])
                conn.execute(text(f"TRUNCATE TABLE {quoted} RESTART IDENTITY CASCADE"))
            return

        for table in reversed(database.Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture(scope="function", autouse=True)
def _truncate_tables_between_tests():
    _wipe_tables()
    yield
    _wipe_tables()


def _persist(row):
    db = database.SessionLocal()
    try:
        db.add(row)
        db.commit()
        db.refresh(row)
        return row
    finally:
        db.close()


@pytest.fixture
def project_factory():
    counter = {"n": 0}

    def _make(company_id: int, budget_cents: int = 0, status: str = "ACTIVE", **kwargs) -> Project:
        counter["n"] += 1
        return _persist(
            Project(
                company_id=company_id,
                number=kwargs.pop("number", f"P-{company_id}-{counter['n']:04d}"),
                name=kwargs.pop("name", f"Geländer {counter['n']}"),
                project_type=kwargs.pop("project_type", "KOMBINIERT"),
                status=status,
                budget_cents=budget_cents,
                actual_cost_total_cents=0,
                **kwargs,
            )
        )

    return _make


@pytest.fixture
def phase_factory():
    def _make(company_id: int, project_id: int, **kwargs) -> ProjectPhase:
        return _persist(
            ProjectPhase(
                company_id=company_id,
                project_id=project_id,
                name=kwargs.pop("name", "Fertigung"),
                phase_type=kwargs.pop("phase_type", "FERTIGUNG"),
                sequence=kwargs.pop("sequence", 1),
                **kwargs,
            )
        )

    return _make


@pytest.fixture
def machine_factory():
    def _make(company_id: int, hourly_rate_cents: int = 5000, status: str = "ACTIVE", **kwargs) -> Machine:
        return _persist(
            Machine(
                company_id=company_id,
                name=kwargs.pop("name", "Laser 3kW"),
                machine_type=kwargs.pop("machine_type", "LASER"),
                status=status,
                hourly_rate_cents=hourly_rate_cents,
                **kwargs,
            )
        )

    return _make


@pytest.fixture
def product_factory():
    def _make(company_id: int, purchase_price_cents: int = 1000, stock_quantity="10", **kwargs) -> Product:
        return _persist(
            Product(
                company_id=company_id,
                name=kwargs.pop("name", "Flachstahl 40x8"),
                unit=kwargs.pop("unit", "m"),
                purchase_price_cents=purchase_price_cents,
                stock_quantity=Decimal(str(stock_quantity)),
                **kwargs,
            )
        )

    return _make


@pytest.fixture
def invoice_factory():
    def _make(company_id: int, project_id: int, total_amount_cents: int, status: str = "SENT", **kwargs) -> Invoice:
        return _persist(
            Invoice(
                company_id=company_id,
                project_id=project_id,
                number=kwargs.pop("number", f"RE-{project_id}-{total_amount_cents}"),
                status=status,
                total_amount_cents=total_amount_cents,
                paid_amount_cents=kwargs.pop("paid_amount_cents", 0),
                **kwargs,
            )
        )

    return _make


@pytest.fixture
def seeded_time_types():
    def _seed(company_id: int) -> dict:
        db = database.SessionLocal()
        try:
            rows = [TimeType(company_id=company_id, **spec) for spec in DEFAULT_TIME_TYPES]
            db.add_all(rows)
            db.commit()
            return {row.code: row.id for row in rows}
        finally:
            db.close()

    return _seed
