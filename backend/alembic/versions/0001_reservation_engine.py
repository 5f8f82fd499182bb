"""Create reservation engine tables.

Revision ID: 0001_reservation_engine
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_reservation_engine"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="EMPLOYEE"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "vehicles",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("registration_number", sa.String(50), nullable=False),
        sa.Column("brand", sa.String(100), nullable=True),
        sa.Column("model", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="AVAILABLE"),
        sa.Column("current_distance", sa.Integer, nullable=False, server_default="0"),
        sa.Column("daily_rate", sa.Numeric(12, 2), nullable=True),
        sa.Column("distance_rate", sa.Numeric(12, 2), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_vehicles_registration_number", "vehicles", ["registration_number"], unique=True)
    op.create_index("ix_vehicles_status", "vehicles", ["status"])

    op.create_table(
        "reservations",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("reference_number", sa.String(50), nullable=False),
        sa.Column("vehicle_id", sa.String(36), sa.ForeignKey("vehicles.id"), nullable=False),
        sa.Column("requester_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("driver_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("approver_id", sa.String(36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("start_time", sa.DateTime, nullable=False),
        sa.Column("end_time", sa.DateTime, nullable=False),
        sa.Column("actual_start_time", sa.DateTime, nullable=True),
        sa.Column("actual_end_time", sa.DateTime, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("purpose", sa.String(500), nullable=True),
        sa.Column("destination", sa.String(255), nullable=True),
        sa.Column("passenger_count", sa.Integer, nullable=False, server_default="1"),
        sa.Column("needs_driver", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("estimated_distance", sa.Integer, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("check_in_distance", sa.Integer, nullable=True),
        sa.Column("check_in_notes", sa.Text, nullable=True),
        sa.Column("check_out_distance", sa.Integer, nullable=True),
        sa.Column("check_out_notes", sa.Text, nullable=True),
        sa.Column("actual_distance", sa.Integer, nullable=True),
        sa.Column("estimated_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("actual_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("cancellation_reason", sa.Text, nullable=True),
        sa.Column("approved_at", sa.DateTime, nullable=True),
        sa.Column("rating", sa.Integer, nullable=True),
        sa.Column("feedback", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_reservations_reference_number", "reservations", ["reference_number"], unique=True)
    op.create_index("ix_reservations_vehicle_id", "reservations", ["vehicle_id"])
    op.create_index("ix_reservations_requester_id", "reservations", ["requester_id"])
    op.create_index("ix_reservations_driver_id", "reservations", ["driver_id"])
    op.create_index("ix_reservations_status", "reservations", ["status"])
    op.create_index("ix_reservations_start_time", "reservations", ["start_time"])
    op.create_index("ix_reservations_end_time", "reservations", ["end_time"])

    op.create_table(
        "reservation_history",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("reservation_id", sa.String(36), sa.ForeignKey("reservations.id"), nullable=False),
        sa.Column("previous_status", sa.String(20), nullable=True),
        sa.Column("new_status", sa.String(20), nullable=False),
        sa.Column("changed_by", sa.String(36), nullable=True),
        sa.Column("comment", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_reservation_history_reservation_id", "reservation_history", ["reservation_id"])
    op.create_index("ix_reservation_history_created_at", "reservation_history", ["created_at"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False, server_default="MEDIUM"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=True),
        sa.Column("entity_id", sa.String(36), nullable=True),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("read_at", sa.DateTime, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_type", "notifications", ["type"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])

    op.create_table(
        "notification_preferences",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("in_app_reservation", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("in_app_approval", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("in_app_reminder", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("in_app_system", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("email_enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("updated_at", sa.DateTime, nullable=False),
    )

    op.create_table(
        "system_audit_logs",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("user_role", sa.String(20), nullable=True),
        sa.Column("old_value", sa.JSON, nullable=True),
        sa.Column("new_value", sa.JSON, nullable=True),
        sa.Column("metadata", sa.JSON, nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("timestamp", sa.DateTime, nullable=False),
    )
    op.create_index("ix_system_audit_logs_entity_type", "system_audit_logs", ["entity_type"])
    op.create_index("ix_system_audit_logs_entity_id", "system_audit_logs", ["entity_id"])
    op.create_index("ix_system_audit_logs_timestamp", "system_audit_logs", ["timestamp"])


def downgrade() -> None:
    op.drop_table("system_audit_logs")
    op.drop_table("notification_preferences")
    op.drop_table("notifications")
    op.drop_table("reservation_history")
    op.drop_table("reservations")
    op.drop_table("vehicles")
    op.drop_table("users")
