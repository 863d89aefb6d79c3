"""
Product service: referential validity and image association for products.

Every write resolves the product's category first, so a product can never
point at a category that does not exist. Images live in object storage;
the product keeps only the public URL.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import joinedload
from werkzeug.datastructures import FileStorage

from catalog_admin.exceptions import NotFoundError, ValidationError
from catalog_admin.models import Category, Product
from catalog_admin.services.storage_service import get_storage_service
from catalog_admin.utils.pagination import PageRequest, paginate

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND_MESSAGE = 'Product not found'
CATEGORY_NOT_FOUND_MESSAGE = 'Category not found'
EMPTY_CATEGORY_MESSAGE = 'No products found in this category'

# Fields copied from validated input onto the Product row
PRODUCT_FIELDS = ('name', 'description', 'price', 'stock', 'color', 'ram', 'storage')


def save_product_image(file: Optional[FileStorage]) -> Optional[str]:
    """
    Upload a product image to S3-compatible storage.

    Returns:
        Public URL of the uploaded object, or None when no file was sent

    Raises:
        ValidationError: If the file is rejected (size, type, extension)
    """
    if not file or not file.filename:
        return None

    storage = get_storage_service()
    object_name = storage.build_object_name(file.filename)
    try:
        return storage.upload_file(
            file=file,
            object_name=object_name,
            content_type=file.content_type
        )
    except ValueError as e:
        raise ValidationError([f"image: {e}"])


def delete_product_image(image_url: Optional[str]) -> bool:
    """
    Delete a product image from storage. Failures are logged, never raised.

    Returns:
        True if deleted successfully, False otherwise
    """
    if not image_url:
        return False

    try:
        storage = get_storage_service()
        object_name = storage.object_name_from_url(image_url)
        return storage.delete_file(object_name)
    except Exception as e:
        logger.warning(f"Failed to delete image {image_url}: {e}")
        return False


def _resolve_category(session, category_id: int) -> Category:
    category = session.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError(CATEGORY_NOT_FOUND_MESSAGE)
    return category


def get_product(session, product_id: int) -> Product:
    """
    Get a product with its category loaded.

    Raises:
        NotFoundError: If the product does not exist
    """
    product = session.query(Product).options(
        joinedload(Product.category)
    ).filter(Product.id == product_id).first()

    if not product:
        raise NotFoundError(PRODUCT_NOT_FOUND_MESSAGE)
    return product


def list_products(session, page_request: PageRequest) -> Tuple[List[Product], int]:
    """List products newest first, with categories populated."""
    query = session.query(Product).options(
        joinedload(Product.category)
    ).order_by(Product.created_at.desc(), Product.id.desc())

    return paginate(query, page_request)


def list_products_by_category(
    session,
    category_id: int,
    page_request: PageRequest,
    empty_as_not_found: bool = True
) -> Tuple[List[Product], int]:
    """
    List the products of one category.

    Args:
        session: Database session
        category_id: Category to filter by
        page_request: Requested page
        empty_as_not_found: Treat a category with zero products as not found

    Raises:
        NotFoundError: If the category does not exist, or holds no products
            and empty_as_not_found is set
    """
    _resolve_category(session, category_id)

    query = session.query(Product).options(
        joinedload(Product.category)
    ).filter(
        Product.category_id == category_id
    ).order_by(Product.created_at.desc(), Product.id.desc())

    products, total = paginate(query, page_request)
    if total == 0 and empty_as_not_found:
        raise NotFoundError(EMPTY_CATEGORY_MESSAGE)

    return products, total


def create_product(session, data: Dict[str, Any], image_file: Optional[FileStorage] = None) -> Product:
    """
    Create a product after checking its category exists.

    The image is only uploaded once the category has been resolved, so a
    rejected product leaves nothing behind in storage.

    Raises:
        NotFoundError: If the category does not exist
        ValidationError: If the image is rejected
    """
    category = _resolve_category(session, data['category'])

    image_url = save_product_image(image_file)

    product = Product(category_id=category.id, image=image_url)
    _apply_fields(product, data)
    session.add(product)

    try:
        session.commit()
    except Exception:
        session.rollback()
        if image_url:
            logger.error(f"Product insert failed after upload; image left in storage: {image_url}")
        raise

    logger.info(f"Product created: id={product.id} name='{product.name}' category_id={category.id}")
    return product


def update_product(
    session,
    product_id: int,
    data: Dict[str, Any],
    image_file: Optional[FileStorage] = None
) -> Product:
    """
    Update a product. Fields absent from `data` keep their stored values,
    and without a new image the stored image URL is kept as is.

    Raises:
        NotFoundError: If the product or the category does not exist
        ValidationError: If the image is rejected
    """
    product = get_product(session, product_id)
    category = _resolve_category(session, data['category'])

    previous_image = product.image
    image_url = save_product_image(image_file)

    _apply_fields(product, data)
    product.category_id = category.id
    if image_url:
        product.image = image_url

    try:
        session.commit()
    except Exception:
        session.rollback()
        raise

    # The old object is only removed once the new reference is stored
    if image_url and previous_image and previous_image != image_url:
        delete_product_image(previous_image)

    logger.info(f"Product updated: id={product.id} name='{product.name}'")
    return get_product(session, product_id)


def delete_product(session, product_id: int) -> None:
    """
    Delete a product by ID, then remove its image from storage.

    Raises:
        NotFoundError: If the product does not exist
    """
    product = session.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError(PRODUCT_NOT_FOUND_MESSAGE)

    image_url = product.image
    session.delete(product)
    session.commit()

    if image_url:
        delete_product_image(image_url)

    logger.info(f"Product deleted: id={product_id}")


def _apply_fields(product: Product, data: Dict[str, Any]) -> None:
    for field in PRODUCT_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if isinstance(value, str) and not value:
            value = None
        setattr(product, field, value)
