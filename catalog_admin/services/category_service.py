"""
Category service: uniqueness and referential-safety rules for categories.

Categories are referenced by products at the application layer only, so
this module is where the integrity guard lives:
- names are unique (exact match)
- a category cannot be deleted while any product points at it
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from catalog_admin.exceptions import ConflictError, NotFoundError
from catalog_admin.models import Category, Product
from catalog_admin.utils.pagination import PageRequest, paginate

logger = logging.getLogger(__name__)

DUPLICATE_NAME_MESSAGE = 'Category name already exists'
CATEGORY_NOT_FOUND_MESSAGE = 'Category not found'
CATEGORY_IN_USE_MESSAGE = 'Cannot delete category because products exist under this category.'


def get_category(session, category_id: int) -> Category:
    """
    Get a category by ID.

    Raises:
        NotFoundError: If the category does not exist
    """
    category = session.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError(CATEGORY_NOT_FOUND_MESSAGE)
    return category


def find_by_name(session, name: str, exclude_id: Optional[int] = None) -> Optional[Category]:
    """Find a category with exactly this name, optionally ignoring one ID."""
    query = session.query(Category).filter(Category.name == name)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first()


def count_products(session, category_id: int) -> int:
    """Count products referencing a category."""
    return session.query(Product).filter(Product.category_id == category_id).count()


def list_categories(session, page_request: PageRequest) -> Tuple[List[Category], int]:
    """
    List active categories, newest first.

    Returns:
        Tuple of (categories on the requested page, total active categories)
    """
    query = session.query(Category).filter(
        Category.is_active == True  # noqa: E712
    ).order_by(Category.created_at.desc(), Category.id.desc())

    return paginate(query, page_request)


def create_category(session, name: str, description: Optional[str] = None) -> Category:
    """
    Create a new category.

    Raises:
        ConflictError: If a category with the same name exists
    """
    if find_by_name(session, name):
        raise ConflictError(DUPLICATE_NAME_MESSAGE)

    category = Category(name=name, description=description or None)
    session.add(category)
    _commit_unique(session)

    logger.info(f"Category created: id={category.id} name='{category.name}'")
    return category


def update_category(session, category_id: int, name: str, description: Optional[str] = None) -> Category:
    """
    Update name and description of a category.

    Raises:
        NotFoundError: If the category does not exist
        ConflictError: If another category already uses the new name
    """
    category = get_category(session, category_id)

    if name != category.name and find_by_name(session, name, exclude_id=category.id):
        raise ConflictError(DUPLICATE_NAME_MESSAGE)

    category.name = name
    category.description = description or None
    _commit_unique(session)

    logger.info(f"Category updated: id={category.id} name='{category.name}'")
    return category


def delete_category(session, category_id: int) -> None:
    """
    Delete a category that no product references.

    Raises:
        ConflictError: If products exist under the category
        NotFoundError: If the category does not exist
    """
    product_count = count_products(session, category_id)
    if product_count > 0:
        logger.warning(f"Refusing to delete category {category_id}: {product_count} products reference it")
        raise ConflictError(CATEGORY_IN_USE_MESSAGE, payload={'product_count': product_count})

    category = get_category(session, category_id)
    session.delete(category)
    session.commit()

    logger.info(f"Category deleted: id={category_id}")


def _commit_unique(session):
    """Commit, turning a unique-name violation from the database into a conflict."""
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        error_msg = str(e.orig).lower()
        if 'unique' in error_msg or 'duplicate' in error_msg:
            raise ConflictError(DUPLICATE_NAME_MESSAGE)
        raise
