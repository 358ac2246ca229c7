"""Infrastructure models package exports."""
from .base import Base, metadata
from .account import AccountModel
from .event import EventModel

__all__ = [
    "Base",
    "metadata",
    "AccountModel",
    "EventModel",
]
