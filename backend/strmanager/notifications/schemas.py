"""Request bodies for the email-sending endpoints."""
from typing import Annotated, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

Email = Annotated[str, StringConstraints(strip_whitespace=True, max_length=255, pattern=EMAIL_PATTERN)]


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class InvitationRequest(_Body):
    email: Email
    full_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)] = Field(alias="fullName")
    role: Literal["manager", "inspector"]
    inspection_type_ids: list[UUID] = Field(default_factory=list, max_length=50, alias="inspectionTypeIds")


class RestockItem(_Body):
    id: Optional[Annotated[str, StringConstraints(max_length=64)]] = None
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
    category: Annotated[str, StringConstraints(max_length=100)] = "Other"
    current_stock: int = Field(ge=0, le=1_000_000, alias="currentStock")
    restock_level: int = Field(ge=0, le=1_000_000, alias="restockLevel")
    unit: Annotated[str, StringConstraints(max_length=50)] = "units"
    supplier: Annotated[str, StringConstraints(max_length=200)] = ""
    supplier_url: Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=2048)]] = Field(default=None, alias="supplierUrl")
    cost: float = Field(default=0, ge=0, le=1_000_000)
    notes: Annotated[str, StringConstraints(max_length=1000)] = ""


class RestockEmailRequest(_Body):
    items: list[RestockItem] = Field(min_length=1, max_length=100)
    recipients: list[Email] = Field(min_length=1, max_length=20)


class WarrantyDigestRequest(_Body):
    recipients: list[Email] = Field(default_factory=list, max_length=20)
