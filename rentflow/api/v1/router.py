"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from rentflow.api.v1 import auth, bookings, categories, issues, notifications, products, users

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Users
api_router.include_router(users.router, prefix="/users", tags=["Users"])

# Catalog
api_router.include_router(categories.router, prefix="/categories", tags=["Categories"])
api_router.include_router(products.router, prefix="/products", tags=["Products"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Notifications
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

# Issues
api_router.include_router(issues.router, prefix="/issues", tags=["Issues"])
