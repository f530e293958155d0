from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .models import DeliveryMethod, OrderStatus

ADDRESS_REQUIRED = "Address information is required for delivery"

# Friendlier wording for the fields customers fill in by hand
_FIELD_MESSAGES = {
    "customerName": "Customer name is required",
    "customerPhone": "Valid phone number is required",
    "deliveryMethod": "Delivery method must be 'delivery' or 'meetup'",
    "status": "Status must be one of: pending, confirmed, in_progress, completed",
}

_OPTIONAL_TEXT_FIELDS = ("street_address", "city", "state", "zip_code", "print_time")

_ESTIMATE_HINT_FIELDS = ("model_weight", "base_cost", "support_cost", "total_cost")

# Validation context key: when set, malformed estimate hints reject the draft
STRICT_ESTIMATES = "strict_estimates"


def validation_messages(exc: PydanticValidationError) -> List[str]:
    """Flatten pydantic errors into one human-readable line per failing field."""
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"])
        if field in _FIELD_MESSAGES:
            message = _FIELD_MESSAGES[field]
        elif "error" in error.get("ctx", {}):
            # Raised from our own validators: keep the message as written
            message = str(error["ctx"]["error"])
        elif field:
            message = f"{field}: {error['msg']}"
        else:
            message = error["msg"]
        if message not in messages:
            messages.append(message)
    return messages


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
        protected_namespaces = ()


class OrderCreate(CamelModel):
    """
    Order draft as submitted by the order form.

    The estimate fields (model_weight .. total_cost) are display hints from the
    client; OrderService decides whether they are used.
    """
    customer_name: str = Field(min_length=1)
    customer_phone: str = Field(min_length=10)
    delivery_method: DeliveryMethod
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    support_removal: bool = False

    model_weight: Optional[Decimal] = None
    print_time: Optional[str] = None
    base_cost: Optional[Decimal] = None
    support_cost: Optional[Decimal] = None
    total_cost: Optional[Decimal] = None

    class Config:
        str_strip_whitespace = True

    @field_validator(*_OPTIONAL_TEXT_FIELDS, mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator(*_ESTIMATE_HINT_FIELDS, mode="before")
    @classmethod
    def _lenient_estimate_hint(cls, value, info: ValidationInfo):
        if isinstance(value, str) and not value.strip():
            return None
        if value is None or (info.context or {}).get(STRICT_ESTIMATES):
            return value
        # Display hints only; an unreadable one is dropped rather than failing the order
        try:
            parsed = Decimal(str(value).strip())
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None

    @model_validator(mode="after")
    def _address_required_for_delivery(self):
        if self.delivery_method is DeliveryMethod.DELIVERY and not (self.street_address and self.zip_code):
            raise ValueError(ADDRESS_REQUIRED)
        return self

    def has_client_estimate(self) -> bool:
        return self.model_weight is not None and bool(self.print_time) and self.base_cost is not None


class OrderUpdate(CamelModel):
    """Partial patch; pricing and identity fields are not patchable."""
    customer_name: Optional[str] = Field(default=None, min_length=1)
    customer_phone: Optional[str] = Field(default=None, min_length=10)
    delivery_method: Optional[DeliveryMethod] = None
    street_address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    status: Optional[OrderStatus] = None

    class Config:
        str_strip_whitespace = True
        extra = "forbid"


class OrderResponse(CamelModel):
    id: str
    customer_name: str
    customer_phone: str
    delivery_method: DeliveryMethod
    street_address: Optional[str]
    city: Optional[str]
    state: Optional[str]
    zip_code: Optional[str]
    model_file_name: Optional[str]
    model_weight: Optional[Decimal]
    print_time: Optional[str]
    base_cost: Optional[Decimal]
    support_removal: bool
    support_cost: Decimal
    total_cost: Optional[Decimal]
    status: OrderStatus
    created_at: datetime
    updated_at: datetime


class ModelAnalysisResponse(BaseModel):
    weight: float
    printTime: str
    baseCost: float
