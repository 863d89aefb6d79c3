"""Products blueprint - REST endpoints for catalog products."""
import logging

from flask import Blueprint, current_app, jsonify, request

from catalog_admin.database import get_session
from catalog_admin.forms import ProductForm, request_formdata, validate_form
from catalog_admin.services import product_service
from catalog_admin.utils.pagination import PageRequest

logger = logging.getLogger(__name__)

products_bp = Blueprint('products', __name__, url_prefix='/api')


def _page_request() -> PageRequest:
    return PageRequest.from_args(
        request.args,
        default_limit=current_app.config.get('DEFAULT_PAGE_LIMIT', 250)
    )


def _products_payload(products, page_request, total):
    return jsonify({
        'success': True,
        'products': [product.to_dict() for product in products],
        'pagination': page_request.meta(total)
    })


@products_bp.route('/products', methods=['GET'])
def view_products():
    """List all products, paginated by ?page and ?limit."""
    page_request = _page_request()
    products, total = product_service.list_products(get_session(), page_request)
    return _products_payload(products, page_request, total)


@products_bp.route('/products', methods=['POST'])
def add_product():
    """
    Create a product.

    Accepts multipart/form-data with an optional `image` file, or JSON.
    """
    form = validate_form(ProductForm)

    product_service.create_product(
        get_session(),
        form.data,
        image_file=request.files.get('image')
    )

    return jsonify({
        'success': True,
        'message': 'Product added successfully'
    }), 201


@products_bp.route('/products/category/<int:category_id>', methods=['GET'])
def view_products_by_category(category_id: int):
    """
    List the products of a category.

    A category with no products answers 404 unless
    EMPTY_CATEGORY_AS_NOT_FOUND is disabled.
    """
    page_request = _page_request()
    products, total = product_service.list_products_by_category(
        get_session(),
        category_id,
        page_request,
        empty_as_not_found=current_app.config.get('EMPTY_CATEGORY_AS_NOT_FOUND', True)
    )
    return _products_payload(products, page_request, total)


@products_bp.route('/products/<int:product_id>', methods=['GET'])
def view_single_product(product_id: int):
    product = product_service.get_product(get_session(), product_id)
    return jsonify({'success': True, 'product': product.to_dict()})


@products_bp.route('/products/<int:product_id>', methods=['PUT'])
def update_product(product_id: int):
    """Update a product. Omitted fields, `image` included, keep their stored values."""
    formdata = request_formdata()
    form = validate_form(ProductForm, formdata)

    submitted = {name: value for name, value in form.data.items() if name in formdata}
    logger.debug(f"Update product {product_id}: fields={sorted(submitted)}")

    product = product_service.update_product(
        get_session(),
        product_id,
        submitted,
        image_file=request.files.get('image')
    )

    return jsonify({
        'success': True,
        'message': 'Product updated successfully',
        'data': product.to_dict()
    })


@products_bp.route('/products/<int:product_id>', methods=['DELETE'])
def delete_product(product_id: int):
    product_service.delete_product(get_session(), product_id)
    return jsonify({'success': True, 'message': 'Product deleted successfully'})
