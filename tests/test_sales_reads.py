import io
import pandas as pd

from sales.sales_service import SalesService

from conftest import checkout_payload


def _record(cashier_user, lines, **kwargs):
    return SalesService.save_transaction(checkout_payload(lines, **kwargs), user_id=cashier_user.id)


def test_pos_product_list(client, cashier_headers, product):
    response = client.get('/sales/products', headers=cashier_headers)

    assert response.status_code == 200
    assert response.get_json() == [{
        'id': product.id,
        'name': 'Paracetamol',
        'category': 'Analgesics',
        'stock': 10,
        'price': '10.00',
        'image': None,
    }]


def test_transactions_newest_first_with_cashier(client, admin_headers, cashier_user, product):
    first = _record(cashier_user, [(product, 1)])
    second = _record(cashier_user, [(product, 2)], customer_name='Efua')

    response = client.get('/sales/transactions', headers=admin_headers)

    assert response.status_code == 200
    rows = response.get_json()
    assert {r['id'] for r in rows} == {first.id, second.id}
    by_id = {r['id']: r for r in rows}
    assert by_id[second.id]['cashier'] == 'Ama Mensah'
    assert by_id[second.id]['items_count'] == 2
    assert by_id[second.id]['customer_name'] == 'Efua'


def test_transaction_details_and_items(client, admin_headers, cashier_user, product):
    sale = _record(cashier_user, [(product, 3)])

    details = client.get(f'/sales/transactions/{sale.id}/details', headers=admin_headers).get_json()
    items = client.get(f'/sales/transactions/{sale.id}/sale-items', headers=admin_headers).get_json()

    assert details['transaction_id'] == sale.transaction_id
    assert details['grand_total'] == '30.00'
    assert len(details['items']) == 1
    assert items[0]['product_name'] == 'Paracetamol'
    assert items[0]['quantity'] == 3
    assert items[0]['profit'] == '12.00'


def test_missing_transaction_is_404(client, admin_headers):
    assert client.get('/sales/transactions/nope/details', headers=admin_headers).status_code == 404
    assert client.get('/sales/transactions/nope/sale-items', headers=admin_headers).status_code == 404


def test_cashier_cannot_browse_transactions(client, cashier_headers):
    assert client.get('/sales/transactions', headers=cashier_headers).status_code == 403


def test_sales_details_rows(client, admin_headers, cashier_user, product):
    sale = _record(cashier_user, [(product, 2)], customer_name='Kwame')

    rows = client.get('/sales/details', headers=admin_headers).get_json()

    assert len(rows) == 1
    row = rows[0]
    assert row['transactionId'] == sale.transaction_id
    assert row['category'] == 'Analgesics'
    assert row['customerName'] == 'Kwame'
    assert row['quantity'] == 2
    assert row['sellingPrice'] == 10.0
    assert row['totalAmount'] == 20.0
    assert row['profit'] == 8.0
    assert row['profitMargin'] == 80.0
    assert row['salesPerson'] == 'Ama Mensah'
    assert row['paymentMethod'] == 'cash'


def test_export_csv(client, admin_headers, cashier_user, product):
    _record(cashier_user, [(product, 1)])

    response = client.get('/sales/export?format=csv', headers=admin_headers)

    assert response.status_code == 200
    assert response.headers['Content-Type'].startswith('text/csv')
    frame = pd.read_csv(io.StringIO(response.get_data(as_text=True)))
    assert list(frame['Product']) == ['Paracetamol']
    assert list(frame['Quantity']) == [1]


def test_export_excel(client, admin_headers, cashier_user, product):
    _record(cashier_user, [(product, 1)])

    response = client.get('/sales/export?format=excel', headers=admin_headers)

    assert response.status_code == 200
    frame = pd.read_excel(io.BytesIO(response.data), engine='openpyxl')
    assert list(frame['Transaction ID'])[0].startswith('TNX-')
