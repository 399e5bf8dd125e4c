"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``PickupPointDTO``: canonical pickup-point descriptor.  Accepts the
  descriptor as a JSON string or a mapping, in canonical form or with the
  carrier's raw keys, and always produces the same typed value.
- ``DeliveryDTO``: HOME address or RELAY phone + pickup point.
- ``CreateOrderItemDTO`` / ``ItemArtifactsDTO``: one printed item and the
  storage paths of its artwork.
- ``CreateOrderDTO``: input for order creation.
- ``OrderFiltersDTO`` / ``OrderPage``: list query and result page.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.orders.constants import BackSideType, DeliveryType, OrderStatus

if TYPE_CHECKING:
    from modules.orders.models import Order

_RAW_ADDRESS_KEYS = ("LgAdr1", "LgAdr2", "LgAdr3", "LgAdr4")


def _parse_json_object(value: Any, label: str) -> Any:
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except ValueError as exc:
            raise ValueError(f"{label} must be a JSON object.") from exc
    return value


def _coordinate(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        return value or None
    return value


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------


class PickupPointDTO(BaseModel):
    """Pickup point chosen by the customer, stored opaquely on the delivery."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    number: str
    name: Optional[str] = None
    address_lines: List[str] = Field(default_factory=list)
    postal_code: str
    city: str
    country: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data: Any) -> Any:
        data = _parse_json_object(data, "Pickup point")
        if not isinstance(data, dict):
            return data
        if "number" in data:
            return {
                **data,
                "latitude": _coordinate(data.get("latitude")),
                "longitude": _coordinate(data.get("longitude")),
            }

        lines = [str(data[key]).strip() for key in _RAW_ADDRESS_KEYS if data.get(key)]
        raw_id = data.get("id")
        return {
            "id": str(raw_id) if raw_id is not None else None,
            "number": str(data.get("Num", "")),
            "name": data.get("name") or (lines[0] if lines else None),
            "address_lines": lines,
            "postal_code": str(data.get("CP") or data.get("cp") or ""),
            "city": data.get("Ville") or data.get("city") or "",
            "country": data.get("Pays") or data.get("country") or "",
            "latitude": _coordinate(data.get("lat")),
            "longitude": _coordinate(data.get("lon")),
        }

    @field_validator("number", "postal_code", "city", "country")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Field is required.")
        return v.strip()


class HomeAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    street: str = Field(min_length=1)
    additional: str = ""
    postal_code: str = Field(min_length=1)
    city: str = Field(min_length=1)
    phone: str = Field(min_length=1)


class RelayDeliveryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    phone: str = Field(min_length=1)
    point: PickupPointDTO


class DeliveryDTO(BaseModel):
    """Delivery block; exactly the section matching ``type`` is required."""

    model_config = ConfigDict(frozen=True)

    type: DeliveryType
    address: Optional[HomeAddressDTO] = None
    relay: Optional[RelayDeliveryDTO] = None

    @model_validator(mode="after")
    def section_matches_type(self):
        if self.type == DeliveryType.HOME and self.address is None:
            raise ValueError("Home delivery requires an address.")
        if self.type == DeliveryType.RELAY and self.relay is None:
            raise ValueError("Relay delivery requires a pickup point.")
        return self


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(BaseModel):
    """Immutable DTO for a single printed item in a creation request."""

    model_config = ConfigDict(frozen=True)

    quantity: int
    characteristics: Dict[str, Any] = Field(default_factory=dict)
    back_side_type: BackSideType = BackSideType.TEMPLATE
    back_template_id: Optional[UUID] = None

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v

    @field_validator("characteristics", mode="before")
    @classmethod
    def parse_characteristics(cls, v: Any) -> Any:
        if v is None:
            return {}
        return _parse_json_object(v, "Characteristics")


class ItemArtifactsDTO(BaseModel):
    """Storage-relative paths of an item's artwork, all optional."""

    model_config = ConfigDict(frozen=True)

    front_original: Optional[str] = None
    front_processed: Optional[str] = None
    back_original: Optional[str] = None
    back_processed: Optional[str] = None


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` must contain at least one item.
    - Each item quantity must be positive.
    - The delivery section matches the delivery type.
    """

    model_config = ConfigDict(frozen=True)

    customer_name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str = ""
    items: List[CreateOrderItemDTO]
    delivery: DeliveryDTO

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class OrderFiltersDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Optional[OrderStatus] = None
    contact: Optional[str] = None

    @field_validator("contact")
    @classmethod
    def blank_contact_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


@dataclass(frozen=True)
class OrderPage:
    items: List[Order]
    total: int
    page: int
    limit: int
