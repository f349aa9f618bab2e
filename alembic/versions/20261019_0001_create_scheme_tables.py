"""create scheme_status, region_summaries, change_events, import_runs tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

_SCHEME_COUNT_COLUMNS: tuple[str, ...] = (
    "total_villages",
    "villages_integrated",
    "functional_villages",
    "partial_villages",
    "non_functional_villages",
    "fully_completed_villages",
    "total_esr",
    "esr_integrated",
    "fully_completed_esr",
    "balance_esr",
    "flow_meters_connected",
    "pressure_transmitters_connected",
    "residual_chlorine_connected",
)

_SUMMARY_COUNT_COLUMNS: tuple[str, ...] = (
    "total_schemes",
    "fully_completed_schemes",
    "partial_esr",
    *_SCHEME_COUNT_COLUMNS,
)


def _count_columns(names: tuple[str, ...]) -> list[sa.Column]:
    return [sa.Column(name, sa.Integer(), server_default="0", nullable=False) for name in names]


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "scheme_status",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("record_key", sa.String(length=255), nullable=False),
        sa.Column("scheme_id", sa.String(length=100), nullable=False),
        sa.Column("scheme_name", sa.String(length=500), nullable=True),
        sa.Column("sr_no", sa.Integer(), nullable=True),
        sa.Column("region", sa.String(length=100), nullable=False),
        sa.Column("circle", sa.String(length=255), nullable=True),
        sa.Column("division", sa.String(length=255), nullable=True),
        sa.Column("sub_division", sa.String(length=255), nullable=True),
        sa.Column("block", sa.String(length=255), nullable=True),
        sa.Column("agency", sa.String(length=255), nullable=True),
        *_count_columns(_SCHEME_COUNT_COLUMNS),
        sa.Column("status", sa.String(length=100), nullable=True),
        sa.Column("functional_status", sa.String(length=100), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("record_key", name="uq_scheme_status_record_key"),
    )
    op.create_index("ix_scheme_status_region", "scheme_status", ["region"], unique=False)
    op.create_index(
        "ix_scheme_status_region_scheme_name",
        "scheme_status",
        ["region", "scheme_name"],
        unique=False,
    )
    op.create_index("ix_scheme_status_scheme_id", "scheme_status", ["scheme_id"], unique=False)

    op.create_table(
        "region_summaries",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("region", sa.String(length=100), nullable=False),
        *_count_columns(_SUMMARY_COUNT_COLUMNS),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("region", name="uq_region_summaries_region"),
    )

    op.create_table(
        "change_events",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("metric_type", sa.String(length=50), nullable=False),
        sa.Column("delta_count", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("region", sa.String(length=100), nullable=False),
        sa.Column("scheme_id", sa.String(length=100), nullable=True),
        sa.Column("scheme_name", sa.String(length=500), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_change_events_occurred_at", "change_events", ["occurred_at"], unique=False)
    op.create_index(
        "ix_change_events_region_occurred_at",
        "change_events",
        ["region", "occurred_at"],
        unique=False,
    )

    op.create_table(
        "import_runs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("file_name", sa.String(length=500), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("summary_payload", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_import_runs_status", "import_runs", ["status"], unique=False)
    op.create_index("ix_import_runs_created_at", "import_runs", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_import_runs_created_at", table_name="import_runs")
    op.drop_index("ix_import_runs_status", table_name="import_runs")
    op.drop_table("import_runs")
    op.drop_index("ix_change_events_region_occurred_at", table_name="change_events")
    op.drop_index("ix_change_events_occurred_at", table_name="change_events")
    op.drop_table("change_events")
    op.drop_table("region_summaries")
    op.drop_index("ix_scheme_status_scheme_id", table_name="scheme_status")
    op.drop_index("ix_scheme_status_region_scheme_name", table_name="scheme_status")
    op.drop_index("ix_scheme_status_region", table_name="scheme_status")
    op.drop_table("scheme_status")
