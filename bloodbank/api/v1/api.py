from fastapi import APIRouter
from bloodbank.api.v1.endpoints import eligibility, inventory

api_router = APIRouter()

api_router.include_router(eligibility.router, prefix="/eligibility", tags=["eligibility"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
