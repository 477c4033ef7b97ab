from app import db
from app.models.product import product_categories


class Category(db.Model):
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(300), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    desc = db.Column(db.Text)
    image_file_name = db.Column(db.String(2000))
    priority = db.Column(db.Integer, nullable=False, default=1)

    # Relationships
    products = db.relationship('Product', secondary=product_categories,
                               back_populates='categories', lazy='select')

    def to_dict(self):
        return {
            'slug': self.slug,
            'name': self.name,
            'desc': self.desc,
            'imageFileName': self.image_file_name,
            'priority': self.priority,
        }

    def __repr__(self):
        return f'<Category {self.slug}>'
