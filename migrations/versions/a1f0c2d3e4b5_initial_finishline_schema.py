"""initial_finishline_schema

Users, teams, WBS elements (projects + work packages), description
bullets, change requests with their extension rows, and the change log.

Revision ID: a1f0c2d3e4b5
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "a1f0c2d3e4b5"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("email_id", sa.String(length=100), nullable=True),
        sa.Column("google_auth_id", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="GUEST"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("email_id"),
        sa.UniqueConstraint("google_auth_id"),
    )

    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("team_name", sa.String(length=100), nullable=False),
        sa.Column("slack_id", sa.String(length=50), nullable=False),
        sa.Column("leader_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["leader_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("team_name"),
    )
    op.create_index("ix_teams_leader_id", "teams", ["leader_id"])

    op.create_table(
        "wbs_elements",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("date_created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("car_number", sa.Integer(), nullable=False),
        sa.Column("project_number", sa.Integer(), nullable=False),
        sa.Column("work_package_number", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="INACTIVE"),
        sa.Column("project_lead_id", sa.Integer(), nullable=True),
        sa.Column("project_manager_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["project_lead_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["project_manager_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("car_number", "project_number", "work_package_number", name="uq_wbs_number"),
    )
    op.create_index("ix_wbs_elements_project_lead_id", "wbs_elements", ["project_lead_id"])
    op.create_index("ix_wbs_elements_project_manager_id", "wbs_elements", ["project_manager_id"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("wbs_element_id", sa.Integer(), nullable=False),
        sa.Column("budget", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("summary", sa.Text(), nullable=False, server_default=""),
        sa.Column("google_drive_folder_link", sa.String(length=500), nullable=True),
        sa.Column("slide_deck_link", sa.String(length=500), nullable=True),
        sa.Column("bom_link", sa.String(length=500), nullable=True),
        sa.Column("task_list_link", sa.String(length=500), nullable=True),
        sa.Column("rules", sa.JSON(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["wbs_element_id"], ["wbs_elements.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("wbs_element_id"),
    )
    op.create_index("ix_projects_team_id", "projects", ["team_id"])

    op.create_table(
        "work_packages",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("wbs_element_id", sa.Integer(), nullable=False),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("order_in_project", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False, server_default="1"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["wbs_element_id"], ["wbs_elements.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("wbs_element_id"),
    )
    op.create_index("ix_work_packages_project_id", "work_packages", ["project_id"])

    op.create_table(
        "work_package_dependencies",
        sa.Column("work_package_id", sa.Integer(), nullable=False),
        sa.Column("wbs_element_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["work_package_id"], ["work_packages.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["wbs_element_id"], ["wbs_elements.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("work_package_id", "wbs_element_id"),
    )

    op.create_table(
        "description_bullets",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("date_added", sa.DateTime(timezone=True), nullable=False),
        sa.Column("detail", sa.Text(), nullable=False),
        sa.Column("date_deleted", sa.DateTime(timezone=True), nullable=True),
        sa.Column("date_time_checked", sa.DateTime(timezone=True), nullable=True),
        sa.Column("user_checked_id", sa.Integer(), nullable=True),
        sa.Column("project_id_goals", sa.Integer(), nullable=True),
        sa.Column("project_id_features", sa.Integer(), nullable=True),
        sa.Column("project_id_other_constraints", sa.Integer(), nullable=True),
        sa.Column("work_package_id_expected_activities", sa.Integer(), nullable=True),
        sa.Column("work_package_id_deliverables", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["user_checked_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["project_id_goals"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["project_id_features"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["project_id_other_constraints"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["work_package_id_expected_activities"], ["work_packages.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["work_package_id_deliverables"], ["work_packages.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in (
        "project_id_goals",
        "project_id_features",
        "project_id_other_constraints",
        "work_package_id_expected_activities",
        "work_package_id_deliverables",
    ):
        op.create_index(f"ix_description_bullets_{column}", "description_bullets", [column])

    op.create_table(
        "change_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("submitter_id", sa.Integer(), nullable=False),
        sa.Column("date_submitted", sa.DateTime(timezone=True), nullable=False),
        sa.Column("wbs_element_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("reviewer_id", sa.Integer(), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("accepted", sa.Boolean(), nullable=True),
        sa.Column("date_reviewed", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["submitter_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["reviewer_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["wbs_element_id"], ["wbs_elements.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_change_requests_submitter_id", "change_requests", ["submitter_id"])
    op.create_index("ix_change_requests_wbs_element_id", "change_requests", ["wbs_element_id"])

    op.create_table(
        "activation_change_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("change_request_id", sa.Integer(), nullable=False),
        sa.Column("project_lead_id", sa.Integer(), nullable=False),
        sa.Column("project_manager_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("confirm_details", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["change_request_id"], ["change_requests.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["project_lead_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["project_manager_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("change_request_id"),
    )

    op.create_table(
        "stage_gate_change_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("change_request_id", sa.Integer(), nullable=False),
        sa.Column("leftover_budget", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("confirm_done", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(["change_request_id"], ["change_requests.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("change_request_id"),
    )

    op.create_table(
        "scope_change_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("change_request_id", sa.Integer(), nullable=False),
        sa.Column("what", sa.Text(), nullable=False),
        sa.Column("scope_impact", sa.Text(), nullable=False, server_default=""),
        sa.Column("timeline_impact", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("budget_impact", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["change_request_id"], ["change_requests.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("change_request_id"),
    )

    op.create_table(
        "change_request_explanations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("scope_change_request_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False),
        sa.Column("explain", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["scope_change_request_id"], ["scope_change_requests.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_change_request_explanations_scope_change_request_id",
        "change_request_explanations", ["scope_change_request_id"],
    )

    op.create_table(
        "proposed_solutions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("scope_change_request_id", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("scope_impact", sa.Text(), nullable=False),
        sa.Column("timeline_impact", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("budget_impact", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by_id", sa.Integer(), nullable=False),
        sa.Column("date_created", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["scope_change_request_id"], ["scope_change_requests.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_proposed_solutions_scope_change_request_id",
        "proposed_solutions", ["scope_change_request_id"],
    )

    op.create_table(
        "changes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("change_request_id", sa.Integer(), nullable=False),
        sa.Column("date_implemented", sa.DateTime(timezone=True), nullable=False),
        sa.Column("implementer_id", sa.Integer(), nullable=False),
        sa.Column("wbs_element_id", sa.Integer(), nullable=False),
        sa.Column("detail", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["change_request_id"], ["change_requests.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["implementer_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["wbs_element_id"], ["wbs_elements.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_change_cr", "changes", ["change_request_id"])
    op.create_index("idx_change_wbs", "changes", ["wbs_element_id"])


def downgrade():
    for table in (
        "changes",
        "proposed_solutions",
        "change_request_explanations",
        "scope_change_requests",
        "stage_gate_change_requests",
        "activation_change_requests",
        "change_requests",
        "description_bullets",
        "work_package_dependencies",
        "work_packages",
        "projects",
        "wbs_elements",
        "teams",
        "users",
    ):
        op.drop_table(table)
