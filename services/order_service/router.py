from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile

from shared.config.settings import Settings
from shared.dependencies import get_order_service, get_settings
from shared.errors import OrderNotFoundError, ValidationError
from services.model_service.uploads import read_model_upload, read_optional_upload

from .schemas import ModelAnalysisResponse, OrderResponse
from .service import OrderService

router = APIRouter(tags=["Orders"])
public_router = APIRouter()  # For any public endpoints (e.g. health check)


@public_router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    return {"service": settings.service_name, "status": "running"}


@router.post("/analyze-model", response_model=ModelAnalysisResponse)
async def analyze_model(
    modelFile: Optional[UploadFile] = File(default=None),
    service: OrderService = Depends(get_order_service),
    settings: Settings = Depends(get_settings),
):
    """Preview weight, print time and base cost for a model file. Nothing is stored."""
    if modelFile is None or not modelFile.filename:
        raise ValidationError(["No file uploaded"])

    upload = await read_model_upload(modelFile, settings.max_upload_bytes)
    result = service.analyze_model(upload)
    return ModelAnalysisResponse(
        weight=float(result.weight_grams),
        printTime=result.print_time,
        baseCost=float(result.base_cost),
    )


@router.post("/orders", response_model=OrderResponse)
async def create_order(
    customerName: Optional[str] = Form(default=None),
    customerPhone: Optional[str] = Form(default=None),
    deliveryMethod: Optional[str] = Form(default=None),
    streetAddress: Optional[str] = Form(default=None),
    city: Optional[str] = Form(default=None),
    state: Optional[str] = Form(default=None),
    zipCode: Optional[str] = Form(default=None),
    supportRemoval: Optional[str] = Form(default=None),
    modelWeight: Optional[str] = Form(default=None),
    printTime: Optional[str] = Form(default=None),
    baseCost: Optional[str] = Form(default=None),
    supportCost: Optional[str] = Form(default=None),
    totalCost: Optional[str] = Form(default=None),
    modelFile: Optional[UploadFile] = File(default=None),
    service: OrderService = Depends(get_order_service),
    settings: Settings = Depends(get_settings),
):
    # Field checks belong to OrderCreate so the 400 carries our messages, not FastAPI's 422
    payload = {
        "customerName": customerName,
        "customerPhone": customerPhone,
        "deliveryMethod": deliveryMethod,
        "streetAddress": streetAddress,
        "city": city,
        "state": state,
        "zipCode": zipCode,
        "supportRemoval": supportRemoval or False,
        "modelWeight": modelWeight,
        "printTime": printTime,
        "baseCost": baseCost,
        "supportCost": supportCost,
        "totalCost": totalCost,
    }
    upload = await read_optional_upload(modelFile, settings.max_upload_bytes)
    return await service.submit_order(payload, upload)


@router.get("/orders", response_model=List[OrderResponse])
async def list_orders(service: OrderService = Depends(get_order_service)):
    return await service.list_orders()


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, service: OrderService = Depends(get_order_service)):
    order = await service.get_order(order_id)
    if not order:
        raise OrderNotFoundError(order_id)
    return order


@router.patch("/orders/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: str,
    patch: Dict[str, Any] = Body(...),
    service: OrderService = Depends(get_order_service),
):
    order = await service.update_order(order_id, patch)
    if not order:
        raise OrderNotFoundError(order_id)
    return order
