import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from shared.errors import StorageError, ValidationError
from shared.observability import (
    print_model_analyses_total,
    print_order_notifications_total,
    print_order_submission_duration_seconds,
    print_orders_created_total,
)
from services.model_service.estimator import ModelEstimate, estimate, to_money
from services.model_service.uploads import UploadedModel

from .models import DeliveryMethod, Order
from .repository import OrderRepository
from .schemas import ADDRESS_REQUIRED, STRICT_ESTIMATES, OrderCreate, OrderUpdate, validation_messages

logger = structlog.get_logger(__name__)

SUPPORT_REMOVAL_FEE = Decimal("5.00")
NO_SUPPORT_COST = Decimal("0.00")


@dataclass(frozen=True)
class Pricing:
    model_weight: Optional[Decimal]
    print_time: Optional[str]
    base_cost: Optional[Decimal]
    support_cost: Decimal
    total_cost: Optional[Decimal]


class OrderService:
    def __init__(
        self,
        repository: OrderRepository,
        notifier,
        support_removal_fee: Decimal = SUPPORT_REMOVAL_FEE,
        trust_client_estimates: bool = False,
    ):
        self._repository = repository
        self._notifier = notifier
        self._support_removal_fee = to_money(support_removal_fee)
        self._trust_client_estimates = trust_client_estimates

    # --- Preview ---

    def analyze_model(self, upload: UploadedModel) -> ModelEstimate:
        result = estimate(upload.size)
        print_model_analyses_total.inc()
        logger.info(
            "model_analyzed",
            file_name=upload.filename,
            size_bytes=upload.size,
            weight=str(result.weight_grams),
            print_time=result.print_time,
            base_cost=str(result.base_cost),
        )
        return result

    # --- Submission ---

    async def submit_order(
        self,
        payload: Union[OrderCreate, Mapping[str, Any]],
        upload: Optional[UploadedModel] = None,
    ) -> Order:
        started = time.perf_counter()

        # 1. Validate (nothing is stored on failure)
        draft = self._validate_draft(payload)

        # 2-3. Build the record and price it
        try:
            pricing = self._price(draft, upload)
        except Exception as e:
            logger.exception("order_pricing_failed", file_name=upload.filename if upload else None)
            raise StorageError("Failed to price order") from e

        order = Order(
            customer_name=draft.customer_name,
            customer_phone=draft.customer_phone,
            delivery_method=draft.delivery_method,
            street_address=draft.street_address,
            city=draft.city,
            state=draft.state,
            zip_code=draft.zip_code,
            model_file_name=upload.filename if upload else None,
            model_weight=pricing.model_weight,
            print_time=pricing.print_time,
            base_cost=pricing.base_cost,
            support_removal=draft.support_removal,
            support_cost=pricing.support_cost,
            total_cost=pricing.total_cost,
        )

        # 4. Persist; the terminal step, so a failure leaves nothing behind
        order = await self._repository.create(order)
        print_orders_created_total.labels(delivery_method=order.delivery_method.value).inc()
        logger.info(
            "order_created",
            order_id=order.id,
            delivery_method=order.delivery_method.value,
            file_name=order.model_file_name,
            total_cost=str(order.total_cost) if order.total_cost is not None else None,
        )

        # 5. Notify; never fails the submission
        await self._notify(order, upload)

        print_order_submission_duration_seconds.observe(time.perf_counter() - started)
        return order

    def _validate_draft(self, payload) -> OrderCreate:
        if isinstance(payload, OrderCreate):
            return payload
        try:
            return OrderCreate.model_validate(
                dict(payload), context={STRICT_ESTIMATES: self._trust_client_estimates}
            )
        except PydanticValidationError as e:
            raise ValidationError(validation_messages(e)) from e

    def _price(self, draft: OrderCreate, upload: Optional[UploadedModel]) -> Pricing:
        support_cost = self._support_removal_fee if draft.support_removal else NO_SUPPORT_COST

        if upload is None:
            # Nothing to estimate from; the shop prices it by hand
            return Pricing(None, None, None, support_cost, None)

        if self._trust_client_estimates and draft.has_client_estimate():
            base_cost = to_money(draft.base_cost)
            if draft.support_cost is not None:
                support_cost = to_money(draft.support_cost)
            total_cost = to_money(draft.total_cost) if draft.total_cost is not None else base_cost + support_cost
            logger.info("client_estimate_accepted", file_name=upload.filename)
            return Pricing(to_money(draft.model_weight), draft.print_time, base_cost, support_cost, total_cost)

        result = self.analyze_model(upload)
        pricing = Pricing(
            model_weight=result.weight_grams,
            print_time=result.print_time,
            base_cost=result.base_cost,
            support_cost=support_cost,
            total_cost=result.base_cost + support_cost,
        )
        self._log_estimate_mismatch(draft, pricing)
        return pricing

    def _log_estimate_mismatch(self, draft: OrderCreate, pricing: Pricing):
        hints = {
            "model_weight": (draft.model_weight, pricing.model_weight),
            "print_time": (draft.print_time, pricing.print_time),
            "base_cost": (draft.base_cost, pricing.base_cost),
            "total_cost": (draft.total_cost, pricing.total_cost),
        }
        mismatched = {
            field: {"client": str(client), "server": str(server)}
            for field, (client, server) in hints.items()
            if client is not None and client != server
        }
        if mismatched:
            logger.warning("client_estimate_mismatch", fields=mismatched)

    async def _notify(self, order: Order, upload: Optional[UploadedModel]) -> bool:
        try:
            return await self._notifier.notify(order, upload)
        except Exception:
            # Notifier implementations handle their own transport errors; this is the last guard
            logger.exception("order_notification_failed", order_id=order.id)
            print_order_notifications_total.labels(status="failed").inc()
            return False

    # --- Lookup and maintenance ---

    async def get_order(self, order_id: str) -> Optional[Order]:
        return await self._repository.get(order_id)

    async def list_orders(self) -> List[Order]:
        return await self._repository.list_all()

    async def update_order(self, order_id: str, payload: Mapping[str, Any]) -> Optional[Order]:
        try:
            patch = OrderUpdate.model_validate(dict(payload))
        except PydanticValidationError as e:
            raise ValidationError(validation_messages(e)) from e

        changes = patch.model_dump(exclude_unset=True)
        for field in ("customer_name", "customer_phone", "delivery_method", "status"):
            if field in changes and changes[field] is None:
                raise ValidationError([f"{to_camel(field)} cannot be cleared"])

        existing = await self._repository.get(order_id)
        if not existing:
            return None

        method = changes.get("delivery_method", existing.delivery_method)
        if method is DeliveryMethod.DELIVERY:
            street = changes.get("street_address", existing.street_address)
            zip_code = changes.get("zip_code", existing.zip_code)
            if not (street and zip_code):
                raise ValidationError([ADDRESS_REQUIRED])

        order = await self._repository.update(order_id, changes)
        if order:
            logger.info("order_updated", order_id=order_id, fields=sorted(changes), status=order.status.value)
        return order
