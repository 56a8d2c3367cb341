from models import db, BIGINT
from datetime import datetime


STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
REGISTRATION_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)


class VendorRegistrationRequest(db.Model):
    """A vendor's application, kept until an admin approves or rejects it."""

    __tablename__ = "vendor_registration_requests"
    # One open (pending or approved) application per email.
    __table_args__ = (
        db.Index(
            "uq_vendor_registration_open_email",
            "email",
            unique=True,
            postgresql_where=db.text("status != 'rejected'"),
            sqlite_where=db.text("status != 'rejected'"),
        ),
    )

    id = db.Column(BIGINT, primary_key=True)

    # Personal information
    full_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(20), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)

    # Business details
    company_name = db.Column(db.String(150), nullable=False)
    business_type = db.Column(db.String(100), nullable=True)
    business_category = db.Column(db.String(100), nullable=True)
    years_in_business = db.Column(db.String(20), nullable=True)
    number_of_employees = db.Column(db.String(20), nullable=True)

    # Address & location
    address_line1 = db.Column(db.String(255), nullable=True)
    address_line2 = db.Column(db.String(255), nullable=True)
    landmark = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    state = db.Column(db.String(100), nullable=False, default="Kerala")
    pin_code = db.Column(db.String(12), nullable=True)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    delivery_radius = db.Column(db.Float, nullable=False, default=5)

    # Agent reference
    agent_code = db.Column(db.String(50), nullable=True)
    agent_name = db.Column(db.String(100), nullable=True)
    agent_phone = db.Column(db.String(20), nullable=True)
    agent_visit_date = db.Column(db.String(30), nullable=True)
    reference_notes = db.Column(db.Text, nullable=True)

    # GST & documents
    gst_number = db.Column(db.String(20), nullable=True)
    gst_verified = db.Column(db.Boolean, default=False)
    gst_details = db.Column(db.JSON, nullable=True)  # raw lookup payload, stored as-is
    gst_certificate = db.Column(db.String(500), nullable=True)

    # Branding
    logo = db.Column(db.String(500), nullable=True)
    banner = db.Column(db.String(500), nullable=True)
    tagline = db.Column(db.String(255), nullable=True)

    # Package selection
    selected_package = db.Column(db.String(20), nullable=False, default="premium")
    billing_cycle = db.Column(db.String(20), nullable=False, default="monthly")
    add_ons = db.Column(db.JSON, nullable=True)

    # Terms
    terms_accepted = db.Column(db.Boolean, default=False)
    privacy_accepted = db.Column(db.Boolean, default=False)

    # Workflow
    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING, index=True)
    reviewed_by = db.Column(BIGINT, db.ForeignKey("users.id"), nullable=True)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def full_address(self) -> str:
        if self.address_line2:
            return f"{self.address_line1 or ''}, {self.address_line2}"
        return self.address_line1 or ""

    def to_dict(self):
        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "companyName": self.company_name,
            "businessType": self.business_type,
            "businessCategory": self.business_category,
            "yearsInBusiness": self.years_in_business,
            "numberOfEmployees": self.number_of_employees,
            "addressLine1": self.address_line1,
            "addressLine2": self.address_line2,
            "landmark": self.landmark,
            "city": self.city,
            "state": self.state,
            "pinCode": self.pin_code,
            "coordinates": (
                {"lat": self.latitude, "lng": self.longitude}
                if self.latitude is not None and self.longitude is not None
                else None
            ),
            "deliveryRadius": self.delivery_radius,
            "agentCode": self.agent_code,
            "agentName": self.agent_name,
            "gstNumber": self.gst_number,
            "gstVerified": self.gst_verified,
            "gstDetails": self.gst_details,
            "gstCertificate": self.gst_certificate,
            "logo": self.logo,
            "banner": self.banner,
            "tagline": self.tagline,
            "selectedPackage": self.selected_package,
            "billingCycle": self.billing_cycle,
            "addOns": self.add_ons,
            "termsAccepted": self.terms_accepted,
            "privacyAccepted": self.privacy_accepted,
            "status": self.status,
            "reviewedBy": self.reviewed_by,
            "reviewedAt": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "rejectionReason": self.rejection_reason,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class VendorProfile(db.Model):
    __tablename__ = "vendor_profiles"

    id = db.Column(BIGINT, primary_key=True)
    user_id = db.Column(BIGINT, db.ForeignKey("users.id"), unique=True, nullable=False)
    store_name = db.Column(db.String(150), nullable=False)
    store_slug = db.Column(db.String(160), unique=True, nullable=False, index=True)
    description = db.Column(db.String(500), nullable=True)
    address = db.Column(db.String(500), nullable=True)
    city = db.Column(db.String(100), nullable=True)
    state = db.Column(db.String(100), nullable=True)
    zip_code = db.Column(db.String(12), nullable=True)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    delivery_radius = db.Column(db.Float, default=5)
    business_license = db.Column(db.String(50), nullable=True)  # GST number
    logo_url = db.Column(db.String(500), nullable=True)
    banner_url = db.Column(db.String(500), nullable=True)
    is_verified = db.Column(db.Boolean, default=False)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship("User", back_populates="vendor_profile")

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "storeName": self.store_name,
            "storeSlug": self.store_slug,
            "description": self.description,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "deliveryRadius": self.delivery_radius,
            "logoUrl": self.logo_url,
            "bannerUrl": self.banner_url,
            "isVerified": self.is_verified,
        }
