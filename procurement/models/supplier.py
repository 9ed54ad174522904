import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Optional
from pydantic import AfterValidator, EmailStr, Field, computed_field, field_validator
from procurement.models.base import CamelModel, MongoModel

# Digits with optional leading "+" and common separators; 7 to 15 digits total.
MOBILE_PATTERN = re.compile(r"^\+?[0-9][0-9 \-()]{5,18}[0-9]$")


class Country(str, Enum):
    UNITED_STATES = "United States"
    UNITED_KINGDOM = "United Kingdom"
    CANADA = "Canada"
    AUSTRALIA = "Australia"
    GERMANY = "Germany"
    FRANCE = "France"
    JAPAN = "Japan"
    CHINA = "China"
    INDIA = "India"


class SupplierStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    BLOCKED = "Blocked"


def check_mobile_no(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    digits = re.sub(r"\D", "", value)
    if not MOBILE_PATTERN.match(value) or not 7 <= len(digits) <= 15:
        raise ValueError(f"{value} is not a valid mobile number!")
    return value


MobileNo = Annotated[str, AfterValidator(check_mobile_no)]


class Supplier(MongoModel):
    """
    Supplier master data.
    """
    supplier_no: str = Field(..., description="Sequential SUP-###### number")
    supplier_name: str
    address: str
    country: Country
    tax_no: str
    mobile_no: str
    email: str
    status: SupplierStatus = SupplierStatus.ACTIVE

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @computed_field
    @property
    def full_address(self) -> str:
        return f"{self.address}, {self.country}"


class SupplierCreate(CamelModel):
    supplier_name: str = Field(..., min_length=2, max_length=100)
    address: str = Field(..., min_length=1)
    country: Country
    tax_no: str = Field(..., min_length=1)
    mobile_no: MobileNo
    email: EmailStr
    status: SupplierStatus = SupplierStatus.ACTIVE

    @field_validator("supplier_name", "address", "tax_no")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class SupplierUpdate(CamelModel):
    supplier_name: Optional[str] = Field(None, min_length=2, max_length=100)
    address: Optional[str] = Field(None, min_length=1)
    country: Optional[Country] = None
    tax_no: Optional[str] = Field(None, min_length=1)
    mobile_no: Optional[MobileNo] = None
    email: Optional[EmailStr] = None
    status: Optional[SupplierStatus] = None

    @field_validator("supplier_name", "address", "tax_no")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v
