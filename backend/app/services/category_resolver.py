"""
Category resolution.

Turns a category name into a Category row of a given type. An unknown name
is an error for the caller to surface; it never falls back to some other
category.
"""
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.exceptions import InvalidReferenceError, UnresolvedCategoryError
from app.models.category import Category


def get_category(db: Session, category_id: str, category_type: Optional[str] = None) -> Category:
    category = db.get(Category, category_id)
    if category is None or (category_type and category.category_type != category_type):
        raise InvalidReferenceError("Category", category_id)
    return category


def resolve_category(db: Session, name: Optional[str], category_type: str) -> Optional[Category]:
    """Active category of the given type whose name matches (case-insensitive), or None."""
    if not name or not name.strip():
        return None
    return db.query(Category).filter(
        func.lower(Category.name) == name.strip().lower(),
        Category.category_type == category_type,
        Category.is_active.is_(True),
    ).first()


def require_category(db: Session, name: str, category_type: str) -> Category:
    category = resolve_category(db, name, category_type)
    if category is None:
        raise UnresolvedCategoryError(name, category_type=category_type)
    return category


def apply_routing_category(
    db: Session,
    draft,
    category_id: Optional[str] = None,
    category_name: Optional[str] = None,
) -> None:
    """
    Set draft.category / draft.category_id from an id or a name.

    The id wins when both are given. With neither, the draft is left as is
    and validation reports the missing category.
    """
    if category_id:
        category = get_category(db, category_id, "routing")
    elif category_name and category_name.strip():
        category = require_category(db, category_name, "routing")
    else:
        return
    draft.category = category.name
    draft.category_id = category.id
