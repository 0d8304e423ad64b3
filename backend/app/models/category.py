"""
Category model

Categories group processes, routings, materials and finishes in the admin
dashboard. Each category belongs to exactly one category_type.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Text, Boolean, DateTime

from app.db.base import Base


CATEGORY_TYPES = ("process", "routing", "material", "finish")


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False, index=True)
    category_type = Column(String(20), nullable=False, index=True)  # see CATEGORY_TYPES
    description = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Category {self.category_type}:{self.name}>"
