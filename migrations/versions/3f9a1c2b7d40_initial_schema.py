"""Initial schema for users, catalog, orders and newsletter

Revision ID: 3f9a1c2b7d40
Revises:
Create Date: 2026-10-19 09:12:31.402118

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f9a1c2b7d40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=255), nullable=False, server_default='member'),
        sa.Column('avatar_file_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('slug', sa.String(length=300), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('desc', sa.Text(), nullable=True),
        sa.Column('image_file_name', sa.String(length=2000), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('slug', sa.String(length=300), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('desc', sa.Text(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('image_file_name', sa.String(length=2000), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
        sa.CheckConstraint('quantity >= 0', name='ck_products_quantity_non_negative'),
    )

    op.create_table(
        'product_categories',
        sa.Column('product_slug', sa.String(length=300), nullable=False),
        sa.Column('category_slug', sa.String(length=300), nullable=False),
        sa.ForeignKeyConstraint(['product_slug'], ['products.slug'],
                                ondelete='CASCADE', onupdate='CASCADE'),
        sa.ForeignKeyConstraint(['category_slug'], ['categories.slug'],
                                ondelete='CASCADE', onupdate='CASCADE'),
        sa.PrimaryKeyConstraint('product_slug', 'category_slug'),
    )
    op.create_index('ix_product_categories_category_slug', 'product_categories', ['category_slug'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('delivery_method', sa.String(length=255), nullable=False),
        sa.Column('delivery_address', sa.Text(), nullable=True),
        sa.Column('delivery_time', sa.DateTime(), nullable=True),
        sa.Column('pickup_at', sa.Text(), nullable=True),
        sa.Column('delivery_note', sa.Text(), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('customer_phone_number', sa.String(length=255), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(length=255), nullable=False, server_default='processing'),
        sa.Column('quantity_restored', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id'),
    )

    op.create_table(
        'order_counters',
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('value', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('name'),
    )

    op.create_table(
        'newsletter_subscribers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )


def downgrade():
    op.drop_table('newsletter_subscribers')
    op.drop_table('order_counters')
    op.drop_table('orders')
    op.drop_index('ix_product_categories_category_slug', table_name='product_categories')
    op.drop_table('product_categories')
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_table('users')
