"""Create issues table"""

revision = "20251019_000100"
down_revision = "20251019_000000"
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa

ISSUE_TYPES = (
    "pothole",
    "garbage",
    "streetlight",
    "water_leak",
    "broken_sidewalk",
    "traffic_signal",
    "street_sign",
    "drainage",
    "tree_maintenance",
    "graffiti",
    "noise_complaint",
    "parking_violation",
    "other",
)


def _in(column: str, values) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


def upgrade():
    """Create the issues table with its lookup indexes."""
    op.create_table(
        "issues",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("issue_type", sa.String(17), nullable=False, index=True),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("photo_url", sa.Text),
        sa.Column("priority", sa.String(8)),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("location_address", sa.String(512)),
        sa.Column("status", sa.String(11), nullable=False, server_default="pending", index=True),
        sa.Column("admin_notes", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(_in("issue_type", ISSUE_TYPES), name="issue_type"),
        sa.CheckConstraint(_in("status", ("pending", "in_progress", "resolved")), name="issue_status"),
        sa.CheckConstraint(
            _in("priority", ("low", "medium", "high", "critical")), name="issue_priority"
        ),
    )
    op.create_index("idx_issues_user_created", "issues", ["user_id", "created_at"])


def downgrade():
    """Drop the issues table."""
    op.drop_index("idx_issues_user_created", table_name="issues")
    op.drop_table("issues")
