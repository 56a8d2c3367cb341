from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, constr
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinates(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class VendorRegistrationForm(CamelModel):
    """Assembled output of the multi-step vendor registration wizard."""

    full_name: constr(strip_whitespace=True, min_length=1, max_length=100)
    email: EmailStr
    phone: constr(strip_whitespace=True, min_length=6, max_length=20)
    password: constr(min_length=8, max_length=128)
    company_name: constr(strip_whitespace=True, min_length=1, max_length=150)

    business_type: Optional[str] = None
    business_category: Optional[str] = None
    years_in_business: Optional[str] = None
    number_of_employees: Optional[str] = None

    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    landmark: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pin_code: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    delivery_radius: Optional[float] = Field(default=None, gt=0, le=100)

    agent_code: Optional[str] = None
    agent_name: Optional[str] = None
    agent_phone: Optional[str] = None
    agent_visit_date: Optional[str] = None
    reference_notes: Optional[str] = None

    gst_number: Optional[str] = None
    gst_verified: bool = False
    gst_details: Optional[Any] = None
    gst_certificate: Optional[str] = None

    logo: Optional[str] = None
    banner: Optional[str] = None
    tagline: Optional[str] = None

    selected_package: Optional[str] = None
    billing_cycle: Optional[str] = None
    add_ons: Optional[List[Any]] = None

    terms_accepted: bool = False
    privacy_accepted: bool = False
