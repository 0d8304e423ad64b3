"""
Manufacturing Process Model

A process is a reusable manufacturing operation (laser cutting, bending,
powder coating...) with the pricing attributes that routing steps copy when
they are created.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Numeric, Boolean, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from app.db.base import Base


class Process(Base):
    __tablename__ = "processes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True, index=True)
    description = Column(Text, nullable=True)

    # Pricing
    setup_time_minutes = Column(Numeric(10, 2), default=0, nullable=False)
    hourly_rate = Column(Numeric(18, 4), default=0, nullable=False)
    minimum_cost = Column(Numeric(18, 4), default=0, nullable=False)
    complexity_multiplier = Column(Numeric(8, 4), default=1, nullable=False)

    # Shop floor info
    equipment_required = Column(String(200), nullable=True)
    skill_level = Column(String(50), nullable=True)  # 'basic', 'intermediate', 'expert'

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    category = relationship("Category")

    def __repr__(self):
        return f"<Process {self.name} @ {self.hourly_rate}/hr>"
