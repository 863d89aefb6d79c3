"""Categories blueprint - REST endpoints for catalog categories."""
from flask import Blueprint, current_app, jsonify, request

from catalog_admin.database import get_session
from catalog_admin.forms import CategoryForm, validate_form
from catalog_admin.services import category_service
from catalog_admin.utils.pagination import PageRequest

categories_bp = Blueprint('categories', __name__, url_prefix='/api')


@categories_bp.route('/categories', methods=['POST'])
def add_category():
    """Create a category. Responds 201 without echoing the record."""
    form = validate_form(CategoryForm)

    category_service.create_category(
        get_session(),
        name=form.name.data,
        description=form.description.data
    )

    return jsonify({
        'success': True,
        'message': 'Category added successfully'
    }), 201


@categories_bp.route('/categories', methods=['GET'])
def view_categories():
    """List active categories, newest first, paginated by ?page and ?limit."""
    page_request = PageRequest.from_args(
        request.args,
        default_limit=current_app.config.get('DEFAULT_PAGE_LIMIT', 250)
    )

    categories, total = category_service.list_categories(get_session(), page_request)

    return jsonify({
        'success': True,
        'categories': [category.to_dict() for category in categories],
        'pagination': page_request.meta(total)
    })


@categories_bp.route('/categories/<int:category_id>', methods=['GET'])
def single_category(category_id: int):
    category = category_service.get_category(get_session(), category_id)
    return jsonify({'success': True, 'category': category.to_dict()})


@categories_bp.route('/categories/<int:category_id>', methods=['PUT'])
def update_category(category_id: int):
    """Update name and description of a category."""
    form = validate_form(CategoryForm)

    category_service.update_category(
        get_session(),
        category_id,
        name=form.name.data,
        description=form.description.data
    )

    return jsonify({
        'success': True,
        'message': 'Category updated successfully'
    })


@categories_bp.route('/categories/<int:category_id>', methods=['DELETE'])
def delete_category(category_id: int):
    """Delete a category. Refused with 409 while products reference it."""
    category_service.delete_category(get_session(), category_id)

    return jsonify({
        'success': True,
        'message': 'Category deleted successfully'
    })
