# --- models/user.py ---
from models import db, BIGINT
from datetime import datetime


ROLE_CUSTOMER = "customer"
ROLE_VENDOR = "vendor"
ROLE_ADMIN = "admin"
ROLES = (ROLE_CUSTOMER, ROLE_VENDOR, ROLE_ADMIN)


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(BIGINT, primary_key=True)
    name = db.Column(db.String(100), nullable=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    role = db.Column(db.String(20), nullable=False, default=ROLE_CUSTOMER)
    email_verified_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    vendor_profile = db.relationship("VendorProfile", back_populates="user", uselist=False)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_vendor(self) -> bool:
        return self.role == ROLE_VENDOR

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "emailVerified": self.email_verified_at.isoformat() if self.email_verified_at else None,
        }

    def __repr__(self):
        return f"<User id={self.id} role={self.role}>"
