"""create leaderboard_entry

Revision ID: 4c2a9e7d1b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e7d1b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)

    # create_app() creates tables on boot; only build the table if it is missing.
    if 'leaderboard_entry' in set(insp.get_table_names()):
        return

    op.create_table(
        'leaderboard_entry',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('time_ms', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('leaderboard_entry') as batch_op:
        batch_op.create_index(batch_op.f('ix_leaderboard_entry_time_ms'), ['time_ms'], unique=False)


def downgrade():
    with op.batch_alter_table('leaderboard_entry') as batch_op:
        batch_op.drop_index(batch_op.f('ix_leaderboard_entry_time_ms'))
    op.drop_table('leaderboard_entry')
