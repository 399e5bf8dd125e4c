"""Payment DTOs.

- ``CreatePaymentDTO``: input for opening a provider checkout session.
- ``PaymentSessionDTO``: the bound provider order and its approval links.
- ``CaptureResultDTO``: settlement outcome, returned unchanged for repeated
  captures of an already-paid order.
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CreatePaymentDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID


class PaymentLinkDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    href: str
    rel: str
    method: str = "GET"


class PaymentSessionDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID
    external_order_id: str
    status: str
    links: List[PaymentLinkDTO] = Field(default_factory=list)


class CaptureResultDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str
    order_id: UUID
    external_order_id: str
    capture_id: Optional[str] = None
