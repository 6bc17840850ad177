from enum import Enum

class Role(str, Enum):
    """Enumerates every role recognised by the platform.

    Inherits from *str* so members compare equal to the raw values stored on
    ``User.role`` and embedded in JWT claims.
    """

    admin = "admin"
    customer = "customer"
