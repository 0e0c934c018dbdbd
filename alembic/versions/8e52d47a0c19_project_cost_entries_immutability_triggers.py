"""project_cost_entries immutability triggers

Revision ID: 8e52d47a0c19
Revises: 3c1f0a9d2b71
Create Date: 2026-09-28 10:02:47.531208

"""
from typing import Sequence, Union

from alembic import op

from metallbau.services.ledger_immutability import BLOCK_MUTATION_DDL, DROP_MUTATION_GUARD_DDL, is_postgres


# revision identifiers, used by Alembic.
revision: str = '8e52d47a0c19'
down_revision: Union[str, Sequence[str], None] = '3c1f0a9d2b71'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # plpgsql triggers; other dialects keep the ledger append-only by convention
    if not is_postgres(op.get_bind()):
        return
    op.execute(BLOCK_MUTATION_DDL)


def downgrade() -> None:
    """Downgrade schema."""
    if not is_postgres(op.get_bind()):
        return
    op.execute(DROP_MUTATION_GUARD_DDL)
