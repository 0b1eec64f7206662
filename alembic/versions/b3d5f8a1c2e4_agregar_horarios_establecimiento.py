"""agregar horarios de apertura al establecimiento

ID de revision: b3d5f8a1c2e4
Revisa: a1c4e7b20f31
Fecha de creacion: 2026-10-18 16:40:02.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# identificadores de revision, usados por Alembic.
revision: str = "b3d5f8a1c2e4"
down_revision: Union[str, None] = "a1c4e7b20f31"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        "establishment",
        sa.Column("opening_hours", sa.JSON(), nullable=True),
    )


def downgrade() -> None:
    op.drop_column("establishment", "opening_hours")
