# Authentication module

from driving_school.modules.auth.dependencies import get_current_admin

__all__ = [
    "get_current_admin",
]
