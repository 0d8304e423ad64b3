"""
Service layer for categories.

Routings resolve their category by name against these rows, so a fresh
deployment creates its categories here before any routing can be saved.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.exceptions import ValidationError
from app.logging_config import get_logger
from app.models.category import Category
from app.services.category_resolver import resolve_category

logger = get_logger(__name__)


def list_categories(
    db: Session,
    category_type: Optional[str] = None,
    active_only: bool = True,
) -> List[Category]:
    query = db.query(Category)
    if category_type:
        query = query.filter(Category.category_type == category_type)
    if active_only:
        query = query.filter(Category.is_active.is_(True))
    return query.order_by(Category.category_type, Category.name).all()


def create_category(db: Session, data: Dict[str, Any]) -> Category:
    """Create a category; names are unique (case-insensitive) per type among active rows."""
    data = dict(data)
    data["name"] = data["name"].strip()
    if not data["name"]:
        raise ValidationError(missing_fields=["name"])
    if resolve_category(db, data["name"], data["category_type"]) is not None:
        raise ValidationError(
            f"{data['category_type'].capitalize()} category '{data['name']}' already exists",
            field="name",
            value=data["name"],
        )

    category = Category(**data)
    db.add(category)
    db.commit()
    db.refresh(category)

    logger.info(
        f"Created {category.category_type} category: {category.name}",
        extra={"category_id": category.id},
    )
    return category
