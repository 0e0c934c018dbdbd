from sqlalchemy import inspect, text

LEDGER_TABLE = "project_cost_entries"

BLOCK_MUTATION_DDL = """
CREATE OR REPLACE FUNCTION project_cost_entries_block_mutation()
RETURNS trigger AS $$
BEGIN
    RAISE EXCEPTION 'project_cost_entries is append-only';
END;
$$ LANGUAGE plpgsql;

DROP TRIGGER IF EXISTS trg_project_cost_entries_block_update ON project_cost_entries;
CREATE TRIGGER trg_project_cost_entries_block_update
BEFORE UPDATE ON project_cost_entries
FOR EACH ROW
EXECUTE FUNCTION project_cost_entries_block_mutation();

DROP TRIGGER IF EXISTS trg_project_cost_entries_block_delete ON project_cost_entries;
CREATE TRIGGER trg_project_cost_entries_block_delete
BEFORE DELETE ON project_cost_entries
FOR EACH ROW
EXECUTE FUNCTION project_cost_entries_block_mutation();
"""

DROP_MUTATION_GUARD_DDL = """
DROP TRIGGER IF EXISTS trg_project_cost_entries_block_update ON project_cost_entries;
DROP TRIGGER IF EXISTS trg_project_cost_entries_block_delete ON project_cost_entries;
DROP FUNCTION IF EXISTS project_cost_entries_block_mutation();
"""


def table_exists(engine, table_name: str) -> bool:
    if engine is None:
        return False
    return inspect(engine).has_table(table_name)


def is_postgres(bind) -> bool:
    dialect = getattr(bind, "dialect", None)
    return dialect is not None and getattr(dialect, "name", "") == "postgresql"


def install_cost_ledger_immutability(engine) -> bool:
    """
    Postgres-only: install triggers that block UPDATE/DELETE on the cost ledger.
    Safe to run multiple times. Returns True when the triggers were installed.
    """
    if engine is None or not is_postgres(engine):
        return False

    if not table_exists(engine, LEDGER_TABLE):
        return False

    with engine.begin() as conn:
        conn.execute(text(BLOCK_MUTATION_DDL))
    return True
