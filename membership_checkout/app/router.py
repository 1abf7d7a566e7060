from fastapi import APIRouter

from membership_checkout.src.billing.endpoints import billing_router


def build_router(api_path: str) -> APIRouter:
    router = APIRouter()
    router.include_router(billing_router, prefix=api_path, tags=['Billing'])
    return router
