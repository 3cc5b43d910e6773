"""Importing this package registers every table on `Base.metadata`."""
from boomerang.models.base import Base
from boomerang.models.capture import Capture
from boomerang.models.contact import Contact
from boomerang.models.owner_profile import OwnerProfile
from boomerang.models.task import Task

__all__ = ["Base", "Capture", "Contact", "OwnerProfile", "Task"]
