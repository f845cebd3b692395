"""Initial schema - users, products, orders, sales, sale items, sessions, integrations

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def money():
    return sa.Numeric(10, 2)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password', sa.String(), nullable=True),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('profile_image_url', sa.String(), nullable=True),
        sa.Column('role', sa.String(), server_default='author', nullable=False),
        sa.Column('created_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('author_id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('isbn', sa.String(), nullable=True),
        sa.Column('author', sa.String(), nullable=False),
        sa.Column('co_authors', sa.String(), nullable=True),
        sa.Column('genre', sa.String(), nullable=False),
        sa.Column('language', sa.String(), nullable=False),
        sa.Column('target_audience', sa.String(), nullable=True),
        sa.Column('pdf_url', sa.String(), nullable=False),
        sa.Column('cover_image_url', sa.String(), nullable=True),
        sa.Column('public_url', sa.String(), nullable=True),
        sa.Column('page_count', sa.Integer(), nullable=False),
        sa.Column('base_cost', money(), nullable=False),
        sa.Column('sale_price', money(), nullable=False),
        sa.Column('margin_percent', sa.Integer(), nullable=False),
        sa.Column('author_earnings', money(), nullable=True),
        sa.Column('platform_commission', money(), nullable=True),
        sa.Column('fixed_fee', money(), nullable=True),
        sa.Column('printing_cost_per_page', money(), nullable=True),
        sa.Column('commission_rate', money(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['author_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_author_id', 'products', ['author_id'])
    op.create_index('idx_products_author_status', 'products', ['author_id', 'status'])

    op.create_table(
        'orders',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('cliente_nome', sa.String(), nullable=False),
        sa.Column('cliente_email', sa.String(), nullable=False),
        sa.Column('cliente_cpf', sa.String(), nullable=True),
        sa.Column('cliente_telefone', sa.String(), nullable=True),
        sa.Column('endereco_rua', sa.String(), nullable=True),
        sa.Column('endereco_numero', sa.String(), nullable=True),
        sa.Column('endereco_bairro', sa.String(), nullable=True),
        sa.Column('endereco_cidade', sa.String(), nullable=True),
        sa.Column('endereco_estado', sa.String(), nullable=True),
        sa.Column('endereco_cep', sa.String(), nullable=True),
        sa.Column('endereco_complemento', sa.String(), nullable=True),
        sa.Column('valor_total', money(), nullable=True),
        sa.Column('forma_pagamento', sa.String(), nullable=True),
        sa.Column('bandeira_cartao', sa.String(), nullable=True),
        sa.Column('parcelas', sa.String(), nullable=True),
        sa.Column('status_pagamento', sa.String(), nullable=True),
        sa.Column('status_envio', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=True),
        sa.Column('created_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'sales',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.String(), nullable=True),
        sa.Column('author_id', sa.String(), nullable=True),
        sa.Column('vendor_order_number', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('idempotency_key', sa.String(length=64), nullable=True),
        sa.Column('buyer_email', sa.String(), nullable=True),
        sa.Column('buyer_name', sa.String(), nullable=True),
        sa.Column('buyer_phone', sa.String(), nullable=True),
        sa.Column('buyer_cpf', sa.String(), nullable=True),
        sa.Column('buyer_address', sa.String(), nullable=True),
        sa.Column('buyer_city', sa.String(), nullable=True),
        sa.Column('buyer_state', sa.String(), nullable=True),
        sa.Column('buyer_zip_code', sa.String(), nullable=True),
        sa.Column('sale_price', money(), nullable=False),
        sa.Column('commission', money(), nullable=False),
        sa.Column('author_earnings', money(), nullable=False),
        sa.Column('order_date', postgresql.TIMESTAMP(timezone=False), nullable=True),
        sa.Column('payment_status', sa.String(), nullable=True),
        sa.Column('payment_method', sa.String(), nullable=True),
        sa.Column('installments', sa.Integer(), nullable=True),
        sa.Column('discount_coupon', sa.String(), nullable=True),
        sa.Column('discount_amount', money(), nullable=True),
        sa.Column('shipping_cost', money(), nullable=True),
        sa.Column('shipping_carrier', sa.String(), nullable=True),
        sa.Column('delivery_days', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=True),
        sa.Column('created_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.ForeignKeyConstraint(['author_id'], ['users.id']),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('author_id', 'vendor_order_number', name='uq_sales_author_vendor_order_number'),
        sa.UniqueConstraint('idempotency_key'),
    )
    op.create_index('ix_sales_order_id', 'sales', ['order_id'])
    op.create_index('ix_sales_author_id', 'sales', ['author_id'])
    op.create_index('ix_sales_product_id', 'sales', ['product_id'])
    op.create_index('idx_sales_author_created', 'sales', ['author_id', 'created_at'])

    op.create_table(
        'sale_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sale_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(), nullable=False),
        sa.Column('product_name', sa.String(), nullable=False),
        sa.Column('price', money(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('foto_produto', sa.String(), nullable=True),
        sa.Column('created_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sale_items_sale_id', 'sale_items', ['sale_id'])

    op.create_table(
        'vendor_order_counters',
        sa.Column('author_id', sa.String(), nullable=False),
        sa.Column('last_number', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['author_id'], ['users.id']),
        sa.PrimaryKeyConstraint('author_id'),
    )

    # Seed counters from whatever sales already exist
    op.execute(
        "INSERT INTO vendor_order_counters (author_id, last_number) "
        "SELECT author_id, MAX(vendor_order_number) FROM sales "
        "WHERE author_id IS NOT NULL GROUP BY author_id"
    )

    op.create_table(
        'sessions',
        sa.Column('sid', sa.String(), nullable=False),
        sa.Column('sess', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('expire', postgresql.TIMESTAMP(timezone=False), nullable=False),
        sa.PrimaryKeyConstraint('sid'),
    )
    op.create_index('IDX_session_expire', 'sessions', ['expire'])

    op.create_table(
        'produto_nuvemshop_mapping',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('id_produto_interno', sa.String(), nullable=False),
        sa.Column('id_autor', sa.String(), nullable=False),
        sa.Column('produto_id_nuvemshop', sa.String(), nullable=False),
        sa.Column('variant_id_nuvemshop', sa.String(), nullable=False),
        sa.Column('sku', sa.String(), nullable=True),
        sa.Column('created_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'api_integrations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('base_url', sa.String(), nullable=False),
        sa.Column('auth_type', sa.String(), nullable=False),
        sa.Column('auth_config', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('headers', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'api_endpoints',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('integration_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('endpoint', sa.String(), nullable=False),
        sa.Column('method', sa.String(), nullable=False),
        sa.Column('request_body', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('response_mapping', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['integration_id'], ['api_integrations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_api_endpoints_integration_id', 'api_endpoints', ['integration_id'])

    op.create_table(
        'api_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('integration_id', sa.Integer(), nullable=False),
        sa.Column('endpoint_id', sa.Integer(), nullable=True),
        sa.Column('method', sa.String(), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('request_headers', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('request_body', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('response_status', sa.Integer(), nullable=True),
        sa.Column('response_headers', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('response_body', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('response_time', sa.Integer(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', postgresql.TIMESTAMP(timezone=False), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['integration_id'], ['api_integrations.id']),
        sa.ForeignKeyConstraint(['endpoint_id'], ['api_endpoints.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_api_logs_integration_id', 'api_logs', ['integration_id'])


def downgrade() -> None:
    op.drop_table('api_logs')
    op.drop_table('api_endpoints')
    op.drop_table('api_integrations')
    op.drop_table('produto_nuvemshop_mapping')
    op.drop_index('IDX_session_expire', table_name='sessions')
    op.drop_table('sessions')
    op.drop_table('vendor_order_counters')
    op.drop_table('sale_items')
    op.drop_table('sales')
    op.drop_table('orders')
    op.drop_table('products')
    op.drop_table('users')
