"""
Shared fixtures for fibre requirement tests.

Order payloads mirror the REST shape the engine receives: an order with an
embedded shade whose blend carries the current fibre stock.
"""
import pytest


def make_fibre(fibre_id, code, stock_kg, name=None, category=None):
    return {
        'id': fibre_id,
        'fibre_code': code,
        'fibre_name': name or code.title(),
        'stock_kg': stock_kg,
        'category': category,
    }


def make_blend(fibre, percentage):
    return {'fibre_id': fibre['id'], 'percentage': percentage, 'fibre': fibre}


def make_order(order_id, quantity_kg, realisation, delivery_date, blend,
               status='pending', raw_cottons=None, shade_id='SH-1'):
    return {
        'id': order_id,
        'order_number': f'ORD-{order_id}',
        'quantity_kg': quantity_kg,
        'realisation': realisation,
        'delivery_date': delivery_date,
        'status': status,
        'shade': {
            'id': shade_id,
            'shade_code': f'SHD-{shade_id}',
            'blend_composition': blend,
            'raw_cotton_compositions': raw_cottons or [],
        },
    }


@pytest.fixture
def cotton():
    return make_fibre('F-COT', 'COT', '900', name='Cotton', category={'name': 'Natural'})


@pytest.fixture
def polyester():
    return make_fibre('F-PES', 'PES', 2000, name='Polyester', category='Synthetic')


@pytest.fixture
def cotton_poly_blend(cotton, polyester):
    return [make_blend(cotton, '60'), make_blend(polyester, 40)]


@pytest.fixture
def two_orders(cotton):
    """Order A (earlier delivery) needs 750 kg cotton, B (later) needs 200 kg"""
    order_b = make_order('B', 160, 80, '2024-07-20', [make_blend(cotton, 100)])
    order_a = make_order('A', 600, 80, '2024-07-10', [make_blend(cotton, 100)])
    return [order_b, order_a]
