import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declared_attr, relationship
from sqlalchemy.sql import func

from .database import Base

# Account types that see internal comments and may act on the review workflow
MUNICIPAL_ROLES = ("municipal", "municipaladmin", "municipaluser", "superAdmin")
STAFF_ROLES = ("municipal", "municipaladmin", "municipaluser")


def generate_uuid():
    """Generate a UUID primary key in the same shape as the auth provider's user ids"""
    return str(uuid.uuid4())


class Customer(Base):
    """A municipality using the portal"""

    __tablename__ = "customers"

    customer_id = Column(String(36), primary_key=True, default=generate_uuid)
    legal_entity_name = Column(String(255), nullable=False)
    doing_business_as = Column(String(255), nullable=True)
    entity_type = Column(String(50), nullable=True)  # city, village, township, county
    business_city = Column(String(255), nullable=True)
    business_state = Column(String(2), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    profiles = relationship("Profile", back_populates="customer")
    service_tiles = relationship("ServiceTile", back_populates="customer")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)  # auth user id (JWT sub)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    # resident, business, municipal, municipaladmin, municipaluser, superAdmin
    account_type = Column(String(50), nullable=False, default="resident")
    customer_id = Column(String(36), ForeignKey("customers.customer_id"), nullable=True)
    business_legal_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="profiles")

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @property
    def is_municipal(self) -> bool:
        return self.account_type in MUNICIPAL_ROLES


class ApplicationMixin:
    """Columns shared by every reviewable application table"""

    @declared_attr
    def user_id(cls):
        return Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)

    @declared_attr
    def customer_id(cls):
        return Column(String(36), ForeignKey("customers.customer_id"), nullable=False, index=True)

    @declared_attr
    def assigned_reviewer_id(cls):
        return Column(String(36), ForeignKey("profiles.id"), nullable=True, index=True)

    merchant_id = Column(String(36), nullable=True)
    merchant_name = Column(String(255), nullable=True)

    # Money is always stored as integer cents
    base_amount_cents = Column(Integer, nullable=False, default=0)
    service_fee_cents = Column(Integer, nullable=False, default=0)
    total_amount_cents = Column(Integer, nullable=False, default=0)
    payment_status = Column(String(50), nullable=True)  # unpaid, paid, refunded

    # Optimistic concurrency: every status/reviewer write bumps the version
    version = Column(Integer, nullable=False, default=1)

    submitted_at = Column(DateTime, nullable=True)
    under_review_at = Column(DateTime, nullable=True)
    information_requested_at = Column(DateTime, nullable=True)
    resubmitted_at = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    denied_at = Column(DateTime, nullable=True)
    withdrawn_at = Column(DateTime, nullable=True)
    expired_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class PermitApplication(ApplicationMixin, Base):
    __tablename__ = "permit_applications"

    permit_id = Column(String(36), primary_key=True, default=generate_uuid)
    permit_number = Column(String(50), nullable=True, unique=True)
    permit_type = Column(String(100), nullable=False)
    application_status = Column(String(50), nullable=False, default="draft", index=True)
    # pending, under_review, needs_revision, approved, rejected
    municipal_review_status = Column(String(50), nullable=True, default="pending")
    property_address = Column(String(500), nullable=False)
    property_pin = Column(String(50), nullable=True)
    scope_of_work = Column(Text, nullable=False)
    estimated_construction_value_cents = Column(Integer, nullable=False, default=0)
    applicant_full_name = Column(String(255), nullable=True)
    applicant_email = Column(String(255), nullable=True)
    denial_reason = Column(Text, nullable=True)
    withdrawal_reason = Column(Text, nullable=True)
    information_request_reason = Column(Text, nullable=True)
    review_notes = Column(Text, nullable=True)
    issued_at = Column(DateTime, nullable=True)
    expiration_date = Column(Date, nullable=True)

    comments = relationship(
        "PermitComment", back_populates="permit", order_by="PermitComment.created_at"
    )


class BusinessLicenseApplication(ApplicationMixin, Base):
    __tablename__ = "business_license_applications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    license_number = Column(String(50), nullable=True, unique=True)
    license_type = Column(String(100), nullable=True)
    application_status = Column(String(50), nullable=False, default="draft", index=True)
    business_legal_name = Column(String(255), nullable=False)
    doing_business_as = Column(String(255), nullable=True)
    business_type = Column(String(100), nullable=True)
    federal_ein = Column(String(20), nullable=True)
    business_street_address = Column(String(500), nullable=True)
    denial_reason = Column(Text, nullable=True)
    # Withdrawal and information-request reasons share the reviewer comments column
    reviewer_comments = Column(Text, nullable=True)
    issued_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)

    comments = relationship(
        "BusinessLicenseComment",
        back_populates="license",
        order_by="BusinessLicenseComment.created_at",
    )


class TaxSubmission(ApplicationMixin, Base):
    __tablename__ = "tax_submissions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tax_type = Column(String(100), nullable=False)  # amusement, food_beverage, hotel_motel
    submission_status = Column(String(50), nullable=False, default="draft", index=True)
    tax_period_start = Column(Date, nullable=False)
    tax_period_end = Column(Date, nullable=False)
    tax_year = Column(Integer, nullable=False)
    calculation_data = Column(JSON, nullable=True)  # line items from the tax return form
    payer_business_name = Column(String(255), nullable=True)
    payer_ein = Column(String(20), nullable=True)
    denial_reason = Column(Text, nullable=True)
    reviewer_comments = Column(Text, nullable=True)
    due_date = Column(Date, nullable=True)

    comments = relationship(
        "TaxSubmissionComment",
        back_populates="submission",
        order_by="TaxSubmissionComment.created_at",
    )


class ServiceTile(Base):
    """A bookable or applicable municipal service configured by a municipality"""

    __tablename__ = "municipal_service_tiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    customer_id = Column(String(36), ForeignKey("customers.customer_id"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    amount_cents = Column(Integer, nullable=False, default=0)
    requires_review = Column(Boolean, default=True, nullable=False)
    has_time_slots = Column(Boolean, default=False, nullable=False)
    booking_mode = Column(String(20), nullable=True)  # time_period or start_time
    # {"start_time": "09:00", "end_time": "17:00", "slot_duration_minutes": 60,
    #  "start_time_interval_minutes": 30, "available_days": ["Monday", ...], "max_advance_days": 30}
    time_slot_config = Column(JSON, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="service_tiles")
    applications = relationship("ServiceApplication", back_populates="tile")


class ServiceApplication(ApplicationMixin, Base):
    __tablename__ = "municipal_service_applications"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tile_id = Column(String(36), ForeignKey("municipal_service_tiles.id"), nullable=False)
    status = Column(String(50), nullable=False, default="draft", index=True)
    applicant_name = Column(String(255), nullable=True)
    applicant_email = Column(String(255), nullable=True)
    form_data = Column(JSON, nullable=True)
    booking_date = Column(Date, nullable=True, index=True)
    booking_start_time = Column(String(5), nullable=True)  # HH:MM
    booking_end_time = Column(String(5), nullable=True)  # HH:MM, time_period bookings only
    denial_reason = Column(Text, nullable=True)
    information_request_reason = Column(Text, nullable=True)
    withdrawal_reason = Column(Text, nullable=True)
    issued_at = Column(DateTime, nullable=True)
    reserved_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    tile = relationship("ServiceTile", back_populates="applications")
    comments = relationship(
        "ServiceApplicationComment",
        back_populates="application",
        order_by="ServiceApplicationComment.created_at",
    )


class CommentMixin:
    """Append-only comment row; author is the profile that wrote it"""

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    @declared_attr
    def reviewer_id(cls):
        return Column(String(36), ForeignKey("profiles.id"), nullable=False)

    @declared_attr
    def reviewer(cls):
        return relationship("Profile")

    comment_text = Column(Text, nullable=False)
    is_internal = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class PermitComment(CommentMixin, Base):
    __tablename__ = "permit_review_comments"

    permit_id = Column(
        String(36), ForeignKey("permit_applications.permit_id"), nullable=False, index=True
    )
    permit = relationship("PermitApplication", back_populates="comments")


class BusinessLicenseComment(CommentMixin, Base):
    __tablename__ = "business_license_comments"

    license_id = Column(
        String(36), ForeignKey("business_license_applications.id"), nullable=False, index=True
    )
    license = relationship("BusinessLicenseApplication", back_populates="comments")


class TaxSubmissionComment(CommentMixin, Base):
    __tablename__ = "tax_submission_comments"

    submission_id = Column(String(36), ForeignKey("tax_submissions.id"), nullable=False, index=True)
    submission = relationship("TaxSubmission", back_populates="comments")


class ServiceApplicationComment(CommentMixin, Base):
    __tablename__ = "municipal_service_application_comments"

    application_id = Column(
        String(36), ForeignKey("municipal_service_applications.id"), nullable=False, index=True
    )
    application = relationship("ServiceApplication", back_populates="comments")
