"""initial schema

Revision ID: 3c1a9e5d7b20
Revises:
Create Date: 2026-10-19 09:12:44.118203

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c1a9e5d7b20'
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column("id", sa.String(length=36), primary_key=True)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table(
        "profiles",
        _id(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=120), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("invited_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"], unique=True)

    op.create_table(
        "user_roles",
        _id(),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"])

    op.create_table(
        "properties",
        _id(),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=60), nullable=True),
        sa.Column("zip", sa.String(length=20), nullable=True),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "user_properties",
        _id(),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "property_id", name="uq_user_properties"),
    )
    op.create_index("ix_user_properties_user_id", "user_properties", ["user_id"])
    op.create_index("ix_user_properties_property_id", "user_properties", ["property_id"])

    op.create_table(
        "invitations",
        _id(),
        sa.Column("owner_id", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=120), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("invitation_token", sa.String(length=64), nullable=False),
        sa.Column("permissions", sa.JSON(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("accepted_at", sa.DateTime(), nullable=True),
        sa.Column("accepted_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_invitations_owner_id", "invitations", ["owner_id"])
    op.create_index("ix_invitations_invitation_token", "invitations", ["invitation_token"], unique=True)

    op.create_table(
        "notification_settings",
        _id(),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("notification_emails", sa.JSON(), nullable=False),
        sa.Column("email_notifications", sa.Boolean(), nullable=False),
        sa.Column("inventory_alerts", sa.Boolean(), nullable=False),
        sa.Column("warranty_alerts", sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "warranties",
        _id(),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id", ondelete="SET NULL"), nullable=True),
        sa.Column("parent_warranty_id", sa.String(length=36), sa.ForeignKey("warranties.id", ondelete="CASCADE"), nullable=True),
        sa.Column("product_name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("vendor", sa.String(length=200), nullable=True),
        sa.Column("manufacturer", sa.String(length=200), nullable=True),
        sa.Column("manufacturer_contact", sa.String(length=255), nullable=True),
        sa.Column("vendor_contact", sa.String(length=255), nullable=True),
        sa.Column("purchased_from", sa.String(length=200), nullable=True),
        sa.Column("cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("purchase_date", sa.Date(), nullable=False),
        sa.Column("warranty_duration_type", sa.String(length=20), nullable=False),
        sa.Column("warranty_duration_custom_days", sa.Integer(), nullable=True),
        sa.Column("warranty_expiration_date", sa.Date(), nullable=False),
        sa.Column("attachment_urls", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_warranties_property_id", "warranties", ["property_id"])
    op.create_index("ix_warranties_parent_warranty_id", "warranties", ["parent_warranty_id"])
    op.create_index("ix_warranties_warranty_expiration_date", "warranties", ["warranty_expiration_date"])

    op.create_table(
        "assets",
        _id(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("brand", sa.String(length=120), nullable=True),
        sa.Column("model_number", sa.String(length=120), nullable=True),
        sa.Column("color_finish", sa.String(length=120), nullable=True),
        sa.Column("dimensions", sa.String(length=120), nullable=True),
        sa.Column("material_type", sa.String(length=120), nullable=True),
        sa.Column("supplier", sa.String(length=200), nullable=True),
        sa.Column("cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id", ondelete="SET NULL"), nullable=True),
        sa.Column("location_in_property", sa.String(length=200), nullable=True),
        sa.Column("condition", sa.String(length=50), nullable=True),
        sa.Column("serial_number", sa.String(length=120), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("photo_urls", sa.JSON(), nullable=False),
        sa.Column("warranty_id", sa.String(length=36), sa.ForeignKey("warranties.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_assets_property_id", "assets", ["property_id"])
    op.create_index("ix_assets_warranty_id", "assets", ["warranty_id"])

    op.create_table(
        "damage_reports",
        _id(),
        sa.Column("title", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("location", sa.String(length=200), nullable=False),
        sa.Column("severity", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("responsible_party", sa.String(length=20), nullable=False),
        sa.Column("damage_date", sa.Date(), nullable=False),
        sa.Column("estimated_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("repair_cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("repair_date", sa.Date(), nullable=True),
        sa.Column("repair_completed", sa.Boolean(), nullable=True),
        sa.Column("insurance_claim_filed", sa.Boolean(), nullable=True),
        sa.Column("claim_number", sa.String(length=120), nullable=True),
        sa.Column("work_order_issued", sa.Boolean(), nullable=True),
        sa.Column("work_order_number", sa.String(length=120), nullable=True),
        sa.Column("photo_urls", sa.JSON(), nullable=False),
        sa.Column("before_photo_urls", sa.JSON(), nullable=False),
        sa.Column("receipt_urls", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reported_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("guest_name", sa.String(length=200), nullable=True),
        sa.Column("reservation_id", sa.String(length=120), nullable=True),
        sa.Column("booking_platform", sa.String(length=30), nullable=True),
        sa.Column("check_in_date", sa.Date(), nullable=True),
        sa.Column("check_out_date", sa.Date(), nullable=True),
        sa.Column("date_damage_discovered", sa.Date(), nullable=True),
        sa.Column("resolution_sought", sa.String(length=40), nullable=True),
        sa.Column("claim_status", sa.String(length=30), nullable=True),
        sa.Column("claim_reference_number", sa.String(length=120), nullable=True),
        sa.Column("claim_deadline", sa.Date(), nullable=True),
        sa.Column("claim_timeline_notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_damage_reports_property_id", "damage_reports", ["property_id"])

    op.create_table(
        "inventory_categories",
        _id(),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_predefined", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "inventory_items",
        _id(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("category_id", sa.String(length=36), sa.ForeignKey("inventory_categories.id", ondelete="SET NULL"), nullable=True),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id", ondelete="SET NULL"), nullable=True),
        sa.Column("current_quantity", sa.Integer(), nullable=False),
        sa.Column("restock_threshold", sa.Integer(), nullable=False),
        sa.Column("reorder_quantity", sa.Integer(), nullable=True),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("unit", sa.String(length=50), nullable=True),
        sa.Column("units_per_package", sa.Integer(), nullable=True),
        sa.Column("cost_per_package", sa.Numeric(12, 2), nullable=True),
        sa.Column("supplier", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("amazon_image_url", sa.String(length=2048), nullable=True),
        sa.Column("amazon_title", sa.String(length=500), nullable=True),
        sa.Column("amazon_link", sa.String(length=2048), nullable=True),
        sa.Column("asin", sa.String(length=20), nullable=True),
        sa.Column("reorder_link", sa.String(length=2048), nullable=True),
        sa.Column("image_url", sa.String(length=2048), nullable=True),
        sa.Column("barcode", sa.String(length=64), nullable=True),
        sa.Column("restock_requested", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_inventory_items_category_id", "inventory_items", ["category_id"])
    op.create_index("ix_inventory_items_property_id", "inventory_items", ["property_id"])

    op.create_table(
        "inventory_updates",
        _id(),
        sa.Column("item_id", sa.String(length=36), sa.ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False),
        sa.Column("previous_quantity", sa.Integer(), nullable=False),
        sa.Column("new_quantity", sa.Integer(), nullable=False),
        sa.Column("change_type", sa.String(length=30), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("updated_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_inventory_updates_item_id", "inventory_updates", ["item_id"])

    op.create_table(
        "inspection_templates",
        _id(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("is_predefined", sa.Boolean(), nullable=False),
        sa.Column("frequency_type", sa.String(length=20), nullable=True),
        sa.Column("frequency_days", sa.Integer(), nullable=True),
        sa.Column("notifications_enabled", sa.Boolean(), nullable=False),
        sa.Column("notification_method", sa.String(length=20), nullable=True),
        sa.Column("notification_days_ahead", sa.Integer(), nullable=True),
        sa.Column("next_occurrence", sa.Date(), nullable=True),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=True),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_inspection_templates_property_id", "inspection_templates", ["property_id"])

    op.create_table(
        "inspection_records",
        _id(),
        sa.Column("template_id", sa.String(length=36), sa.ForeignKey("inspection_templates.id", ondelete="SET NULL"), nullable=True),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id", ondelete="SET NULL"), nullable=True),
        sa.Column("inspection_date", sa.Date(), nullable=False),
        sa.Column("next_due_date", sa.Date(), nullable=True),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("performed_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("entered_by", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_inspection_records_template_id", "inspection_records", ["template_id"])
    op.create_index("ix_inspection_records_property_id", "inspection_records", ["property_id"])


def downgrade():
    for table in (
        "inspection_records", "inspection_templates", "inventory_updates", "inventory_items",
        "inventory_categories", "damage_reports", "assets", "warranties", "notification_settings",
        "invitations", "user_properties", "properties", "user_roles", "profiles",
    ):
        op.drop_table(table)
