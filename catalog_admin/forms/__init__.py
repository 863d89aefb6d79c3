"""Forms package - WTForms used to validate API input."""
from catalog_admin.forms.catalog_forms import CategoryForm, ProductForm, request_formdata, validate_form

__all__ = ['CategoryForm', 'ProductForm', 'request_formdata', 'validate_form']
