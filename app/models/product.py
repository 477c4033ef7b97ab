from app import db

# Association between products and categories, keyed by slug
product_categories = db.Table(
    'product_categories',
    db.Column('product_slug', db.String(300),
              db.ForeignKey('products.slug', ondelete='CASCADE', onupdate='CASCADE'),
              primary_key=True),
    db.Column('category_slug', db.String(300),
              db.ForeignKey('categories.slug', ondelete='CASCADE', onupdate='CASCADE'),
              primary_key=True, index=True),
)


class Product(db.Model):
    __tablename__ = 'products'
    __table_args__ = (
        db.CheckConstraint('quantity >= 0', name='ck_products_quantity_non_negative'),
    )

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(300), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    desc = db.Column(db.Text)
    price = db.Column(db.Integer, nullable=False, default=0)
    image_file_name = db.Column(db.String(2000))
    quantity = db.Column(db.Integer, nullable=False, default=0)
    priority = db.Column(db.Integer, nullable=False, default=1)

    # Relationships
    categories = db.relationship('Category', secondary=product_categories,
                                 back_populates='products', lazy='select')

    def category_slugs(self):
        """Category slugs ordered by category priority, highest first"""
        ordered = sorted(self.categories, key=lambda category: category.priority, reverse=True)
        return [category.slug for category in ordered]

    def to_dict(self):
        return {
            'slug': self.slug,
            'name': self.name,
            'category': self.category_slugs(),
            'desc': self.desc,
            'price': self.price,
            'imageFileName': self.image_file_name,
            'quantity': self.quantity,
            'priority': self.priority,
        }

    def __repr__(self):
        return f'<Product {self.slug}>'
