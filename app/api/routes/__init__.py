from app.api.routes.leases import router as leases_router
from app.api.routes.payments import router as payments_router
from app.api.routes.rent_management import router as rent_management_router

__all__ = [
    "leases_router",
    "payments_router",
    "rent_management_router",
]
