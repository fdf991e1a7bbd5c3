# users/models/__init__.py
from .base import CustomUser

__all__ = [
    "CustomUser",
]
