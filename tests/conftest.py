import io

import pytest

from catalog_admin import create_app
from catalog_admin.database import create_all, drop_all, get_session
from catalog_admin.models import Category, Product
from catalog_admin.services import product_service
from catalog_admin.services.storage_service import StorageService


class FakeStorage(StorageService):
    """StorageService that validates like the real one but keeps objects in memory."""

    def __init__(self, config):
        super().__init__(
            client=None,
            bucket=config['S3_BUCKET'],
            public_url=config['S3_PUBLIC_URL'],
            max_upload_size=config['MAX_UPLOAD_SIZE'],
            allowed_mime_types=config['ALLOWED_MIME_TYPES'],
            allowed_extensions=config['ALLOWED_EXTENSIONS'],
            upload_prefix=config['S3_UPLOAD_PREFIX'],
        )
        self.objects = {}
        self.deleted = []

    def upload_file(self, file, object_name, content_type=None, metadata=None):
        self._validate_file(file)
        self.objects[object_name] = file.stream.read()
        return self.get_public_url(object_name)

    def delete_file(self, object_name):
        self.deleted.append(object_name)
        return self.objects.pop(object_name, None) is not None


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing."""
    app = create_app('config.TestConfig')
    return app


@pytest.fixture(scope='function', autouse=True)
def database(app):
    """Fresh tables for every test."""
    create_all()
    yield
    get_session().remove()
    drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session():
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope='function')
def storage(app, monkeypatch):
    """In-memory object storage wired into the product service."""
    fake = FakeStorage(app.config)
    monkeypatch.setattr(product_service, 'get_storage_service', lambda: fake)
    return fake


@pytest.fixture
def image_file():
    """Factory for multipart image tuples accepted by the Flask test client."""
    def make(filename='phone.png', content_type='image/png', content=b'\x89PNG\r\n\x1a\nfake'):
        return (io.BytesIO(content), filename, content_type)
    return make


@pytest.fixture(scope='function')
def category_id(session):
    """Create a test category and return its ID."""
    category = Category(name='Smartphones', description='Phones and accessories')
    session.add(category)
    session.commit()
    return category.id


@pytest.fixture(scope='function')
def empty_category_id(session):
    """Create a category with no products and return its ID."""
    category = Category(name='Tablets')
    session.add(category)
    session.commit()
    return category.id


@pytest.fixture(scope='function')
def product_id(session, category_id):
    """Create a test product with an image and return its ID."""
    product = Product(
        name='Pixel 8',
        description='Google phone',
        price=699.00,
        stock=10,
        color='Obsidian',
        ram=8,
        storage=128,
        image='http://localhost:9000/uploads/phone_app/products/1-pixel.png',
        category_id=category_id
    )
    session.add(product)
    session.commit()
    return product.id
