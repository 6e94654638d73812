"""SQLAlchemy models package.

All ORM classes are registered here so relationship string resolution does not
depend on import order.
"""

from app.models import (  # noqa: F401
    asset,
    ticket,
    user,
)
