from contact_api.routes.contact import router as contact_router
from contact_api.routes.security import router as security_router

__all__ = ["contact_router", "security_router"]
