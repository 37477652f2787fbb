"""tag and tag_relationship

Revision ID: 4c1e7a2b9d30
Revises:
Create Date: 2026-10-19 10:12:41.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from hextags.common.settings import get_settings

# revision identifiers, used by Alembic.
revision: str = '4c1e7a2b9d30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCHEMA = get_settings().db_schema


def upgrade() -> None:
    op.create_table(
        'tag',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('date_created', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('data_origin', sa.Text(), nullable=True),
        sa.Column('meta_data', sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql'), nullable=True),
        sa.Column('text', sa.String(length=200), nullable=False),
        sa.Column('text_key', sa.String(length=200), nullable=False),
        sa.Column('group', sa.String(length=100), nullable=False),
        sa.CheckConstraint('length(text) > 0', name=op.f('ck_tag_text_not_empty')),
        sa.CheckConstraint('length("group") > 0', name=op.f('ck_tag_group_not_empty')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tag')),
        sa.UniqueConstraint('group', 'text_key', name='uq_tag_group_text_key'),
        schema=SCHEMA,
    )
    op.create_index('ix_tag_text_key', 'tag', ['text_key'], unique=False, schema=SCHEMA)

    tag_fk = f'{SCHEMA}.tag.id' if SCHEMA else 'tag.id'
    op.create_table(
        'tag_relationship',
        sa.Column('entity_id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('property_id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('tag_id', sa.Uuid(), nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=False),
        sa.ForeignKeyConstraint(['tag_id'], [tag_fk],
                                name=op.f('fk_tag_relationship_tag_id_tag'), ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('entity_id', 'property_id', 'tag_id', name=op.f('pk_tag_relationship')),
        schema=SCHEMA,
    )
    op.create_index('ix_tag_relationship_tag_id', 'tag_relationship', ['tag_id'], unique=False, schema=SCHEMA)
    op.create_index('ix_tag_relationship_property', 'tag_relationship',
                    ['entity_id', 'property_id', 'sort_order'], unique=False, schema=SCHEMA)


def downgrade() -> None:
    op.drop_index('ix_tag_relationship_property', table_name='tag_relationship', schema=SCHEMA)
    op.drop_index('ix_tag_relationship_tag_id', table_name='tag_relationship', schema=SCHEMA)
    op.drop_table('tag_relationship', schema=SCHEMA)
    op.drop_index('ix_tag_text_key', table_name='tag', schema=SCHEMA)
    op.drop_table('tag', schema=SCHEMA)
