"""create match_result history table

Revision ID: 4c2a9e1b7d30
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e1b7d30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'match_result' in insp.get_table_names():
        return
    op.create_table(
        'match_result',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('game_id', sa.String(length=64), nullable=False),
        sa.Column('winner_id', sa.String(length=64), nullable=False),
        sa.Column('loser_id', sa.String(length=64), nullable=False),
        sa.Column('reason', sa.String(length=16), nullable=False),
        sa.Column('winner_coins', sa.Integer(), nullable=False),
        sa.Column('loser_coins', sa.Integer(), nullable=False),
        sa.Column('finished_at', sa.BigInteger(), nullable=False),
    )
    with op.batch_alter_table('match_result') as batch_op:
        batch_op.create_index('ix_match_result_game_id', ['game_id'])
        batch_op.create_index('ix_match_result_winner_id', ['winner_id'])
        batch_op.create_index('ix_match_result_loser_id', ['loser_id'])


def downgrade():
    op.drop_table('match_result')
