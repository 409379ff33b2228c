from .errors import EnrollmentError
from .routes import enrollment_error_handler, router, validation_error_handler
from .services import seed_skill_pathways

__all__ = ["EnrollmentError", "enrollment_error_handler", "router", "seed_skill_pathways", "validation_error_handler"]
