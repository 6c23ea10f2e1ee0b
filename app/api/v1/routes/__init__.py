from fastapi import APIRouter

from app.api.v1.routes import bookings, notifications, profile, public, services, stripe, subscription

router = APIRouter()
router.include_router(profile.router, prefix="/profile")
router.include_router(services.router, prefix="/services")
router.include_router(bookings.router, prefix="/bookings")
router.include_router(public.router, prefix="/public")
router.include_router(stripe.router, prefix="/stripe")
router.include_router(subscription.router, prefix="/subscription")
router.include_router(notifications.router, prefix="/notifications")
