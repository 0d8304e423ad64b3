"""Database models"""
from app.models.category import Category, CATEGORY_TYPES
from app.models.process import Process
from app.models.routing import Routing, RoutingStep

__all__ = [
    "Category",
    "CATEGORY_TYPES",
    "Process",
    "Routing",
    "RoutingStep",
]
