"""
Integration tests for the products API.
Storage is replaced by an in-memory fake (see conftest.storage).
"""

from catalog_admin.models import Product


def product_form(category_id, **overrides):
    data = {
        'name': 'Galaxy S24',
        'description': 'Samsung flagship',
        'price': '799.99',
        'stock': '5',
        'color': 'Black',
        'ram': '8',
        'storage': '256',
        'category': str(category_id),
    }
    data.update(overrides)
    return data


class TestCreateProduct:
    """POST /api/products"""

    def test_create_with_image(self, client, session, storage, image_file, category_id):
        data = product_form(category_id, image=image_file())

        response = client.post('/api/products', data=data, content_type='multipart/form-data')

        assert response.status_code == 201
        assert response.json == {'success': True, 'message': 'Product added successfully'}
        product = session.query(Product).one()
        assert product.category_id == category_id
        assert product.image.startswith('http://localhost:9000/uploads/phone_app/products/')
        assert product.image.endswith('-phone.png')
        assert len(storage.objects) == 1

    def test_create_without_image_stores_null(self, client, session, storage, category_id):
        response = client.post('/api/products', json={
            'name': 'Galaxy S24', 'price': 799.99, 'stock': 5, 'category': category_id, 'ram': None
        })

        assert response.status_code == 201
        product = session.query(Product).one()
        assert product.image is None
        assert product.ram is None
        assert storage.objects == {}

    def test_unknown_category_is_not_found_and_nothing_persisted(self, client, session, storage, image_file):
        data = product_form(9999, image=image_file())

        response = client.post('/api/products', data=data, content_type='multipart/form-data')

        assert response.status_code == 404
        assert response.json['message'] == 'Category not found'
        assert session.query(Product).count() == 0
        assert storage.objects == {}

    def test_validation_error(self, client, session, category_id):
        response = client.post('/api/products', json={'name': 'Galaxy S24', 'category': category_id})

        assert response.status_code == 400
        assert response.json['message'] == 'Validation Error'
        assert session.query(Product).count() == 0

    def test_rejected_image_type(self, client, session, storage, image_file, category_id):
        data = product_form(category_id, image=image_file(filename='notes.txt', content_type='text/plain'))

        response = client.post('/api/products', data=data, content_type='multipart/form-data')

        assert response.status_code == 400
        assert session.query(Product).count() == 0


class TestReadProducts:
    """GET /api/products and /api/products/<id>"""

    def test_single_product_populates_category(self, client, product_id, category_id):
        response = client.get(f'/api/products/{product_id}')

        assert response.status_code == 200
        product = response.json['product']
        assert product['name'] == 'Pixel 8'
        assert product['category'] == {'id': category_id, 'name': 'Smartphones'}

    def test_single_product_not_found(self, client):
        response = client.get('/api/products/9999')

        assert response.status_code == 404
        assert response.json == {'success': False, 'message': 'Product not found'}

    def test_list_second_page_of_twelve(self, client, session, category_id):
        ids = []
        for i in range(12):
            product = Product(name=f'Phone {i:02d}', price=100 + i, stock=1, category_id=category_id)
            session.add(product)
            session.flush()
            ids.append(product.id)
        session.commit()

        response = client.get('/api/products?page=2&limit=5')

        assert response.status_code == 200
        assert response.json['pagination'] == {'page': 2, 'limit': 5, 'total': 12, 'pages': 3}
        assert [p['id'] for p in response.json['products']] == list(reversed(ids))[5:10]


class TestProductsByCategory:
    """GET /api/products/category/<category_id>"""

    def test_products_of_category(self, client, product_id, category_id, empty_category_id):
        response = client.get(f'/api/products/category/{category_id}')

        assert response.status_code == 200
        assert [p['id'] for p in response.json['products']] == [product_id]
        assert response.json['pagination']['total'] == 1

    def test_unknown_category(self, client):
        response = client.get('/api/products/category/9999')

        assert response.status_code == 404
        assert response.json['message'] == 'Category not found'

    def test_empty_category_is_not_found(self, client, empty_category_id):
        response = client.get(f'/api/products/category/{empty_category_id}')

        assert response.status_code == 404
        assert response.json == {'success': False, 'message': 'No products found in this category'}

    def test_empty_category_as_empty_page_when_disabled(self, app, client, monkeypatch, empty_category_id):
        monkeypatch.setitem(app.config, 'EMPTY_CATEGORY_AS_NOT_FOUND', False)

        response = client.get(f'/api/products/category/{empty_category_id}')

        assert response.status_code == 200
        assert response.json['products'] == []
        assert response.json['pagination']['total'] == 0


class TestUpdateProduct:
    """PUT /api/products/<id>"""

    def test_update_without_image_preserves_image(self, client, session, storage, product_id, category_id):
        original_image = session.get(Product, product_id).image

        response = client.put(
            f'/api/products/{product_id}',
            data=product_form(category_id, name='Pixel 8 Pro'),
            content_type='multipart/form-data'
        )

        assert response.status_code == 200
        assert response.json['data']['name'] == 'Pixel 8 Pro'
        assert response.json['data']['image'] == original_image
        session.expire_all()
        assert session.get(Product, product_id).image == original_image
        assert storage.deleted == []

    def test_update_with_json_preserves_image(self, client, session, storage, product_id, category_id):
        original_image = session.get(Product, product_id).image

        response = client.put(f'/api/products/{product_id}', json={
            'name': 'Pixel 8a', 'price': 499, 'stock': 2, 'category': category_id
        })

        assert response.status_code == 200
        session.expire_all()
        product = session.get(Product, product_id)
        assert product.image == original_image
        assert product.name == 'Pixel 8a'
        assert product.color == 'Obsidian'
        assert product.ram == 8
        assert product.description == 'Google phone'

    def test_update_without_description_keeps_description(self, client, session, storage, category_id):
        client.post('/api/products', json={
            'name': 'Galaxy S24', 'description': 'Samsung flagship',
            'price': 799, 'stock': 5, 'category': category_id
        })
        product_id = session.query(Product).filter_by(name='Galaxy S24').one().id

        data = product_form(category_id, name='Galaxy S24 Ultra', color='Titanium')
        del data['description']
        response = client.put(f'/api/products/{product_id}', data=data, content_type='multipart/form-data')

        assert response.status_code == 200
        assert response.json['data']['description'] == 'Samsung flagship'
        assert response.json['data']['color'] == 'Titanium'
        session.expire_all()
        assert session.get(Product, product_id).description == 'Samsung flagship'

    def test_update_with_empty_string_clears_optional_field(self, client, session, product_id, category_id):
        response = client.put(f'/api/products/{product_id}', json={
            'name': 'Pixel 8', 'price': 699, 'stock': 10, 'color': '', 'category': category_id
        })

        assert response.status_code == 200
        assert response.json['data']['color'] is None
        assert response.json['data']['description'] == 'Google phone'

    def test_update_with_new_image_replaces_and_removes_old(self, client, session, storage, image_file, product_id, category_id):
        data = product_form(category_id, image=image_file(filename='new.png'))

        response = client.put(f'/api/products/{product_id}', data=data, content_type='multipart/form-data')

        assert response.status_code == 200
        new_image = response.json['data']['image']
        assert new_image.endswith('-new.png')
        assert storage.deleted == ['phone_app/products/1-pixel.png']

    def test_update_moves_product_to_another_category(self, client, session, product_id, empty_category_id):
        response = client.put(f'/api/products/{product_id}', json={
            'name': 'Pixel Tablet', 'price': 499, 'stock': 2, 'category': empty_category_id
        })

        assert response.status_code == 200
        assert response.json['data']['category']['name'] == 'Tablets'

    def test_update_with_unknown_category(self, client, session, product_id):
        response = client.put(f'/api/products/{product_id}', json={
            'name': 'Pixel 8', 'price': 699, 'stock': 10, 'category': 9999
        })

        assert response.status_code == 404
        assert response.json['message'] == 'Category not found'

    def test_update_not_found(self, client, category_id):
        response = client.put('/api/products/9999', json={
            'name': 'Ghost', 'price': 1, 'stock': 1, 'category': category_id
        })

        assert response.status_code == 404
        assert response.json['message'] == 'Product not found'


class TestDeleteProduct:
    """DELETE /api/products/<id>"""

    def test_delete_product(self, client, session, storage, product_id):
        response = client.delete(f'/api/products/{product_id}')

        assert response.status_code == 200
        assert response.json == {'success': True, 'message': 'Product deleted successfully'}
        assert session.get(Product, product_id) is None
        assert storage.deleted == ['phone_app/products/1-pixel.png']

    def test_delete_not_found(self, client):
        response = client.delete('/api/products/9999')

        assert response.status_code == 404

    def test_category_can_be_deleted_after_its_products(self, client, product_id, category_id, storage):
        assert client.delete(f'/api/categories/{category_id}').status_code == 409
        assert client.delete(f'/api/products/{product_id}').status_code == 200
        assert client.delete(f'/api/categories/{category_id}').status_code == 200
