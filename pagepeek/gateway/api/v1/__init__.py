from pagepeek.gateway.api.v1.files import router as files_router
from pagepeek.gateway.api.v1.health import health_router, ping_router

__all__ = ["routers"]
routers = [files_router, health_router, ping_router]
