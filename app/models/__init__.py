from app.models.user import User
from app.models.product import Product, product_categories
from app.models.category import Category
from app.models.order import Order, OrderCounter, OrderStatus, DeliveryMethod
from app.models.newsletter import NewsletterSubscriber

__all__ = ['User', 'Product', 'product_categories', 'Category', 'Order', 'OrderCounter',
           'OrderStatus', 'DeliveryMethod', 'NewsletterSubscriber']
