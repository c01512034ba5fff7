"""migrate_legacy_mnemonic_commands

Revision ID: 7f8e9d0c1b2a
Revises: 1a2b3c4d5e6f
Create Date: 2026-01-19 09:37:52.604418

Data migration rewriting `mnemonics.commands` rows still stored as plain
strings or with string inputs into the step-based format. Reads also migrate
on the fly, so this only saves that work and keeps exports consistent.
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

from schemas.command_formats import migrated_for_storage

# revision identifiers, used by Alembic.
revision: str = "7f8e9d0c1b2a"
down_revision: str | Sequence[str] | None = "1a2b3c4d5e6f"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

mnemonics = sa.table(
    "mnemonics",
    sa.column("id", sa.Integer),
    sa.column("commands", postgresql.JSONB),
)


def upgrade() -> None:
    """Rewrite legacy command shapes in place."""
    conn = op.get_bind()
    rows = conn.execute(sa.select(mnemonics.c.id, mnemonics.c.commands)).all()
    for row in rows:
        migrated = migrated_for_storage(row.commands)
        if migrated is not None:
            conn.execute(
                mnemonics.update()
                .where(mnemonics.c.id == row.id)
                .values(commands=migrated),
            )


def downgrade() -> None:
    """The step-based format is a superset; nothing to undo."""
