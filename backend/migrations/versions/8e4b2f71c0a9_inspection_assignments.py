"""inspection assignments

Revision ID: 8e4b2f71c0a9
Revises: 3c1a9e5d7b20
Create Date: 2026-10-19 15:02:10.542871

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8e4b2f71c0a9'
down_revision = '3c1a9e5d7b20'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "inspection_assignments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("template_id", sa.String(length=36),
                  sa.ForeignKey("inspection_templates.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_to", sa.String(length=36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("template_id", "assigned_to", name="uq_inspection_assignments"),
    )
    op.create_index("ix_inspection_assignments_template_id", "inspection_assignments", ["template_id"])
    op.create_index("ix_inspection_assignments_assigned_to", "inspection_assignments", ["assigned_to"])


def downgrade():
    op.drop_index("ix_inspection_assignments_assigned_to", table_name="inspection_assignments")
    op.drop_index("ix_inspection_assignments_template_id", table_name="inspection_assignments")
    op.drop_table("inspection_assignments")
