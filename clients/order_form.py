"""
Order form client.

Mirrors the browser form: the same field checks run before anything is sent,
a picked model file is analyzed for a live estimate, and the final submission
goes out as multipart form data against the HTTP API only.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field, model_validator

MODEL_FILE_REQUIRED = "Please upload a 3D model file before submitting your order."
SUPPORT_REMOVAL_FEE = Decimal("5.00")


class OrderFormError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class OrderForm(BaseModel):
    customerName: str = Field(min_length=1)
    customerPhone: str = Field(min_length=10)
    deliveryMethod: str = Field(default="delivery", pattern="^(delivery|meetup)$")
    streetAddress: str = ""
    city: str = "Monroe Township"
    state: str = "NJ"
    zipCode: str = ""
    supportRemoval: bool = False

    @model_validator(mode="after")
    def _address_required_for_delivery(self):
        if self.deliveryMethod == "delivery" and not (self.streetAddress and self.zipCode):
            raise ValueError("Address information is required for delivery")
        return self

    def form_fields(self) -> Dict[str, str]:
        fields = self.model_dump()
        fields["supportRemoval"] = "true" if self.supportRemoval else "false"
        return {key: str(value) for key, value in fields.items()}


@dataclass(frozen=True)
class ModelAnalysis:
    weight: float
    printTime: str
    baseCost: float

    def total_cost(self, support_removal: bool, fee: Decimal = SUPPORT_REMOVAL_FEE) -> Decimal:
        base = Decimal(str(self.baseCost))
        return base + fee if support_removal else base


class OrderFormClient:
    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        resp = await self._client.request(method, f"{self.base_url}{path}", **kwargs)
        if resp.status_code >= 400:
            try:
                message = resp.json().get("message", resp.text)
            except ValueError:
                message = resp.text
            raise OrderFormError(resp.status_code, message)
        return resp.json()

    async def analyze(self, filename: str, content: bytes) -> ModelAnalysis:
        data = await self._request("POST", "/api/analyze-model", files={"modelFile": (filename, content)})
        return ModelAnalysis(weight=data["weight"], printTime=data["printTime"], baseCost=data["baseCost"])

    async def submit(self, form: OrderForm, filename: Optional[str], content: Optional[bytes]) -> Dict[str, Any]:
        if not filename or not content:
            raise OrderFormError(400, MODEL_FILE_REQUIRED)
        return await self._request(
            "POST",
            "/api/orders",
            data=form.form_fields(),
            files={"modelFile": (filename, content)},
        )

    async def get_order(self, order_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/api/orders/{order_id}")

    async def aclose(self):
        await self._client.aclose()
