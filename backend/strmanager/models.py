import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, Text, Integer, Numeric, Boolean, Date, DateTime, JSON,
    ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .extensions import db

ROLES = ("owner", "manager", "inspector")


def _uuid():
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class Profile(TimestampMixin, db.Model):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(120), nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    invited_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)

    roles = relationship("UserRole", backref="user", lazy=True, cascade="all, delete-orphan")

    @property
    def role_names(self):
        return sorted(r.role for r in self.roles)


class UserRole(db.Model):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Property(TimestampMixin, db.Model):
    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(120), nullable=False)
    address = Column(String(255), nullable=True)
    city = Column(String(120), nullable=True)
    state = Column(String(60), nullable=True)
    zip = Column(String(20), nullable=True)
    created_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)


class UserProperty(db.Model):
    __tablename__ = "user_properties"
    __table_args__ = (UniqueConstraint("user_id", "property_id", name="uq_user_properties"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Invitation(db.Model):
    __tablename__ = "invitations"

    id = Column(String(36), primary_key=True, default=_uuid)
    owner_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    full_name = Column(String(120), nullable=False)
    role = Column(String(20), nullable=False)
    invitation_token = Column(String(64), nullable=False, unique=True, index=True)
    permissions = Column(JSON, nullable=False, default=dict)
    expires_at = Column(DateTime, nullable=False)
    accepted_at = Column(DateTime, nullable=True)
    accepted_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class NotificationSettings(TimestampMixin, db.Model):
    __tablename__ = "notification_settings"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True)
    notification_emails = Column(JSON, nullable=False, default=list)
    email_notifications = Column(Boolean, nullable=False, default=True)
    inventory_alerts = Column(Boolean, nullable=False, default=True)
    warranty_alerts = Column(Boolean, nullable=False, default=True)


class Warranty(TimestampMixin, db.Model):
    __tablename__ = "warranties"

    id = Column(String(36), primary_key=True, default=_uuid)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True)
    parent_warranty_id = Column(String(36), ForeignKey("warranties.id", ondelete="CASCADE"), nullable=True, index=True)
    product_name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    vendor = Column(String(200), nullable=True)
    manufacturer = Column(String(200), nullable=True)
    manufacturer_contact = Column(String(255), nullable=True)
    vendor_contact = Column(String(255), nullable=True)
    purchased_from = Column(String(200), nullable=True)
    cost = Column(Numeric(12, 2), nullable=True)
    purchase_date = Column(Date, nullable=False)
    warranty_duration_type = Column(String(20), nullable=False)
    warranty_duration_custom_days = Column(Integer, nullable=True)
    warranty_expiration_date = Column(Date, nullable=False, index=True)
    attachment_urls = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)
    created_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)

    property = relationship("Property", lazy="joined")
    children = relationship(
        "Warranty",
        backref=db.backref("parent", remote_side=[id]),
        order_by="Warranty.warranty_expiration_date",
        cascade="all, delete-orphan",
        lazy=True,
    )


class Asset(TimestampMixin, db.Model):
    __tablename__ = "assets"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=True)
    brand = Column(String(120), nullable=True)
    model_number = Column(String(120), nullable=True)
    color_finish = Column(String(120), nullable=True)
    dimensions = Column(String(120), nullable=True)
    material_type = Column(String(120), nullable=True)
    supplier = Column(String(200), nullable=True)
    cost = Column(Numeric(12, 2), nullable=True)
    purchase_date = Column(Date, nullable=True)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True)
    location_in_property = Column(String(200), nullable=True)
    condition = Column(String(50), nullable=True)
    serial_number = Column(String(120), nullable=True)
    description = Column(Text, nullable=True)
    photo_urls = Column(JSON, nullable=False, default=list)
    warranty_id = Column(String(36), ForeignKey("warranties.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)

    property = relationship("Property", lazy="joined")


class DamageReport(TimestampMixin, db.Model):
    __tablename__ = "damage_reports"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(200), nullable=True)
    description = Column(Text, nullable=False)
    location = Column(String(200), nullable=False)
    severity = Column(String(20), nullable=False, default="minor")
    status = Column(String(20), nullable=False, default="reported")
    responsible_party = Column(String(20), nullable=False, default="guest")
    damage_date = Column(Date, nullable=False)
    estimated_value = Column(Numeric(12, 2), nullable=True)
    repair_cost = Column(Numeric(12, 2), nullable=True)
    repair_date = Column(Date, nullable=True)
    repair_completed = Column(Boolean, nullable=True, default=False)
    insurance_claim_filed = Column(Boolean, nullable=True, default=False)
    claim_number = Column(String(120), nullable=True)
    work_order_issued = Column(Boolean, nullable=True, default=False)
    work_order_number = Column(String(120), nullable=True)
    photo_urls = Column(JSON, nullable=False, default=list)
    before_photo_urls = Column(JSON, nullable=False, default=list)
    receipt_urls = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True)
    reported_by = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    guest_name = Column(String(200), nullable=True)
    reservation_id = Column(String(120), nullable=True)
    booking_platform = Column(String(30), nullable=True)
    check_in_date = Column(Date, nullable=True)
    check_out_date = Column(Date, nullable=True)
    date_damage_discovered = Column(Date, nullable=True)
    resolution_sought = Column(String(40), nullable=True)
    claim_status = Column(String(30), nullable=True, default="not_filed")
    claim_reference_number = Column(String(120), nullable=True)
    claim_deadline = Column(Date, nullable=True)
    claim_timeline_notes = Column(Text, nullable=True)

    property = relationship("Property", lazy="joined")


class InventoryCategory(db.Model):
    __tablename__ = "inventory_categories"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    is_predefined = Column(Boolean, nullable=False, default=False)
    created_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class InventoryItem(TimestampMixin, db.Model):
    __tablename__ = "inventory_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(200), nullable=False)
    category_id = Column(String(36), ForeignKey("inventory_categories.id", ondelete="SET NULL"), nullable=True, index=True)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True)
    current_quantity = Column(Integer, nullable=False, default=0)
    restock_threshold = Column(Integer, nullable=False, default=0)
    reorder_quantity = Column(Integer, nullable=True)
    unit_price = Column(Numeric(12, 2), nullable=True)
    unit = Column(String(50), nullable=True)
    units_per_package = Column(Integer, nullable=True)
    cost_per_package = Column(Numeric(12, 2), nullable=True)
    supplier = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    amazon_image_url = Column(String(2048), nullable=True)
    amazon_title = Column(String(500), nullable=True)
    amazon_link = Column(String(2048), nullable=True)
    asin = Column(String(20), nullable=True)
    reorder_link = Column(String(2048), nullable=True)
    image_url = Column(String(2048), nullable=True)
    barcode = Column(String(64), nullable=True)
    restock_requested = Column(Boolean, nullable=False, default=False)
    created_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)

    category = relationship("InventoryCategory", lazy="joined")
    property = relationship("Property", lazy="joined")


class InventoryUpdate(db.Model):
    __tablename__ = "inventory_updates"

    id = Column(String(36), primary_key=True, default=_uuid)
    item_id = Column(String(36), ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True)
    previous_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)
    change_type = Column(String(30), nullable=False)
    notes = Column(Text, nullable=True)
    updated_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class InspectionTemplate(TimestampMixin, db.Model):
    __tablename__ = "inspection_templates"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(200), nullable=False)
    items = Column(JSON, nullable=False, default=list)
    is_predefined = Column(Boolean, nullable=False, default=False)
    frequency_type = Column(String(20), nullable=True)
    frequency_days = Column(Integer, nullable=True)
    notifications_enabled = Column(Boolean, nullable=False, default=False)
    notification_method = Column(String(20), nullable=True)
    notification_days_ahead = Column(Integer, nullable=True)
    next_occurrence = Column(Date, nullable=True)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=True, index=True)
    created_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)


class InspectionRecord(TimestampMixin, db.Model):
    __tablename__ = "inspection_records"

    id = Column(String(36), primary_key=True, default=_uuid)
    template_id = Column(String(36), ForeignKey("inspection_templates.id", ondelete="SET NULL"), nullable=True, index=True)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True)
    inspection_date = Column(Date, nullable=False)
    next_due_date = Column(Date, nullable=True)
    items = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)
    performed_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    entered_by = Column(String(36), ForeignKey("profiles.id"), nullable=False)

    template = relationship("InspectionTemplate", lazy="joined")
    property = relationship("Property", lazy="joined")


class InspectionAssignment(db.Model):
    __tablename__ = "inspection_assignments"
    __table_args__ = (UniqueConstraint("template_id", "assigned_to", name="uq_inspection_assignments"),)

    id = Column(String(36), primary_key=True, default=_uuid)
    template_id = Column(String(36), ForeignKey("inspection_templates.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_to = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    template = relationship(
        "InspectionTemplate",
        lazy="joined",
        backref=db.backref("assignments", cascade="all, delete-orphan", lazy=True),
    )
    assignee = relationship("Profile", foreign_keys=[assigned_to], lazy="joined")
