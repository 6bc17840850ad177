from tourbook.core import BaseError
from tourbook.roles import Role


def get_user_id(user: dict) -> str:
    """Extract user ID from user token"""
    user_id = user.get("sub")
    if not user_id:
        raise BaseError("Invalid user token", status_code=401)
    return str(user_id)


def is_admin(user: dict) -> bool:
    return user.get("role") == Role.admin.value
