from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .winner import Winner  # noqa: F401

__all__ = [
    "Base",
    "Winner",
]
