from .routes import router
from .services import seed_default_users, seed_module_catalog

__all__ = ["router", "seed_default_users", "seed_module_catalog"]
