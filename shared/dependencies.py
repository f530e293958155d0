"""
Request-scoped access to the objects the composition root placed on app.state.
"""
from fastapi import Request

from shared.config.settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_order_service(request: Request):
    return request.app.state.order_service
