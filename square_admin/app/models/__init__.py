"""
Importing any model module loads all of them, so relationship() targets named
by string always resolve when the mappers are configured.
"""

from square_admin.app.models import (  # noqa: F401
    group,
    role,
    square,
    square_user,
    timer,
    user,
)
