"""
Catalog forms for category and product input.

The API accepts both JSON bodies and multipart/form-data (product images),
so request input is normalized into a MultiDict before it reaches the
forms. JSON nulls are dropped so optional fields behave like empty form
inputs.
"""
from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import CombinedMultiDict, MultiDict
from wtforms import FloatField, IntegerField, StringField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional

from catalog_admin.exceptions import ValidationError

# Upper bounds of the product columns: Numeric(10, 2) and 32-bit Integer
MAX_PRICE = 99999999.99
MAX_INT = 2147483647


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _json_value(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def request_formdata():
    """
    Build form data from the current request.

    Returns:
        CombinedMultiDict of files and fields for multipart requests,
        MultiDict of the JSON object for JSON requests, or the plain form.
    """
    if request.is_json:
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            raise ValidationError('Request body must be a JSON object')
        return MultiDict([
            (key, _json_value(value))
            for key, value in body.items()
            if value is not None
        ])

    if request.files:
        return CombinedMultiDict((request.files, request.form))

    return request.form


def validate_form(form_class, formdata=None):
    """
    Instantiate and validate a form, raising ValidationError on failure.

    Error messages are flattened as "<field>: <message>" so the client
    receives a plain list of strings.
    """
    if formdata is None:
        formdata = request_formdata()

    form = form_class(formdata=formdata)
    if not form.validate():
        errors = [
            f"{field_name}: {message}"
            for field_name, messages in form.errors.items()
            for message in messages
        ]
        raise ValidationError(errors)
    return form


class CategoryForm(FlaskForm):
    """Form for creating or updating a category."""

    class Meta:
        csrf = False

    name = StringField(
        'Name',
        filters=[_strip],
        validators=[
            DataRequired(message='name is required'),
            Length(min=3, max=50, message='name must be between 3 and 50 characters')
        ]
    )

    description = TextAreaField(
        'Description',
        filters=[_strip],
        validators=[Optional(), Length(max=200)]
    )


class ProductForm(FlaskForm):
    """Form for creating or updating a product. The image travels as a separate file field."""

    class Meta:
        csrf = False

    name = StringField(
        'Name',
        filters=[_strip],
        validators=[
            DataRequired(message='name is required'),
            Length(min=3, max=50, message='name must be between 3 and 50 characters')
        ]
    )

    description = TextAreaField(
        'Description',
        filters=[_strip],
        validators=[Optional(), Length(max=200)]
    )

    price = FloatField(
        'Price',
        validators=[
            InputRequired(message='price is required'),
            NumberRange(min=0, max=MAX_PRICE, message=f"price must be between 0 and {MAX_PRICE}")
        ]
    )

    stock = IntegerField(
        'Stock',
        validators=[
            InputRequired(message='stock is required'),
            NumberRange(min=0, max=MAX_INT, message=f"stock must be between 0 and {MAX_INT}")
        ]
    )

    color = StringField(
        'Color',
        filters=[_strip],
        validators=[Optional(), Length(min=3, max=30, message='color must be between 3 and 30 characters')]
    )

    ram = IntegerField('RAM', validators=[Optional(), NumberRange(min=0, max=MAX_INT)])

    storage = IntegerField('Storage', validators=[Optional(), NumberRange(min=0, max=MAX_INT)])

    category = IntegerField(
        'Category',
        validators=[
            InputRequired(message='category is required'),
            NumberRange(min=1, max=MAX_INT, message='category must be a valid category id')
        ]
    )
