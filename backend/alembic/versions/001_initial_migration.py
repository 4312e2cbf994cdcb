"""Initial migration - bed and patient tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Creates the bed and patient tables."""

    # Bed table
    op.create_table(
        'bed',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('ward', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('distance_from_station', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('occupant_data', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_bed_ward', 'bed', ['ward'])
    op.create_index('ix_bed_status', 'bed', ['status'])

    # Patient table (ER queue)
    op.create_table(
        'patient',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('triage_level', sa.Integer(), nullable=False),
        sa.Column('condition', sa.String(), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_patient_name', 'patient', ['name'])


def downgrade() -> None:
    """Drops the tables in reverse order."""
    op.drop_index('ix_patient_name', 'patient')
    op.drop_table('patient')

    op.drop_index('ix_bed_status', 'bed')
    op.drop_index('ix_bed_ward', 'bed')
    op.drop_table('bed')
