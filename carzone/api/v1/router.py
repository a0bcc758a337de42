"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from carzone.api.v1 import bookings, cars, payments

api_router = APIRouter()

# Cars
api_router.include_router(cars.router, prefix="/cars", tags=["Cars"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Payments
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])
