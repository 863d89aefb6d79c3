"""Product model."""
from sqlalchemy import Column, BigInteger, Integer, String, Text, Boolean, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from catalog_admin.database import Base
from catalog_admin.utils.formatters import isoformat, to_number


class Product(Base):
    """Product model."""

    __tablename__ = 'product'

    id = Column(BigInteger().with_variant(Integer, 'sqlite'), primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0, server_default='0')
    image = Column(String(512), nullable=True)  # Public URL in object storage
    color = Column(String(30), nullable=True)
    ram = Column(Integer, nullable=True)
    storage = Column(Integer, nullable=True)
    category_id = Column(BigInteger().with_variant(Integer, 'sqlite'), ForeignKey('category.id'), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default='true')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    category = relationship('Category', foreign_keys=[category_id], back_populates='products')

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', category_id={self.category_id})>"

    def to_dict(self):
        """Serialize the product with its category name populated."""
        category = None
        if self.category is not None:
            category = {'id': self.category.id, 'name': self.category.name}

        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': to_number(self.price),
            'stock': self.stock,
            'image': self.image,
            'color': self.color,
            'ram': self.ram,
            'storage': self.storage,
            'category': category,
            'is_active': self.is_active,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }
