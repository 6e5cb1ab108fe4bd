from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("email", sa.String(255), nullable=False, index=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False, index=True),
        sa.Column("owner_id", sa.Integer(), nullable=False, index=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("slug", name="uq_organization_slug"),
    )
    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("org_id", sa.Integer(), nullable=False, index=True),
        sa.Column("user_id", sa.Integer(), nullable=False, index=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("org_id", "user_id", name="uq_members_org_user"),
    )
    op.create_table(
        "app_roles",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("user_id", sa.Integer(), nullable=False, index=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", name="uq_app_roles_user"),
    )
    for table in ("stores", "kpis"):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, index=True),
            sa.Column("org_id", sa.Integer(), nullable=False, index=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        )
    op.create_table(
        "daily_sales",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("kpi_id", sa.Integer(), nullable=False),
        sa.Column("date_key", sa.String(10), nullable=False),
        sa.Column("month_key", sa.String(7), nullable=False, index=True),
        sa.Column("daily_value", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("monthly_goal", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["kpi_id"], ["kpis.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("org_id", "store_id", "kpi_id", "date_key", name="uq_daily_sales_org_store_kpi_date"),
    )
    op.create_index("ix_daily_sales_org_store_kpi_month", "daily_sales", ["org_id", "store_id", "kpi_id", "month_key"])
    op.create_index("ix_daily_sales_org_month", "daily_sales", ["org_id", "month_key"])
    op.create_index("ix_daily_sales_org_date", "daily_sales", ["org_id", "date_key"])
    op.create_table(
        "monthly_rollups",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("org_id", sa.Integer(), nullable=False, index=True),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("kpi_id", sa.Integer(), nullable=False),
        sa.Column("month_key", sa.String(7), nullable=False, index=True),
        sa.Column("total_sales", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("monthly_goal", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("days_recorded", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("closed_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["kpi_id"], ["kpis.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("org_id", "store_id", "kpi_id", "month_key", name="uq_monthly_rollups_org_store_kpi_month"),
    )
    op.create_table(
        "reports",
        sa.Column("id", sa.Integer(), primary_key=True, index=True),
        sa.Column("org_id", sa.Integer(), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("month_key", sa.String(7), nullable=True),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("url", sa.String(500), nullable=False),
        sa.Column("store_ids", sa.JSON(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
    )


def downgrade() -> None:
    op.drop_table("reports")
    op.drop_table("monthly_rollups")
    op.drop_index("ix_daily_sales_org_date", table_name="daily_sales")
    op.drop_index("ix_daily_sales_org_month", table_name="daily_sales")
    op.drop_index("ix_daily_sales_org_store_kpi_month", table_name="daily_sales")
    op.drop_table("daily_sales")
    op.drop_table("kpis")
    op.drop_table("stores")
    op.drop_table("app_roles")
    op.drop_table("members")
    op.drop_table("organizations")
    op.drop_table("users")
