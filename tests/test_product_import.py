import io
from decimal import Decimal

from category.category import Category
from products.product import Product
from products.import_service import ProductImportService, validate_row

UPLOAD_URL = '/imports/products/upload'

HEADER = 'name,category_name,supplier_email,selling_price,cost_price,total_quantity,reorder_level,expiry_date\n'


def _upload(client, headers, text, filename='products.csv'):
    return client.post(
        UPLOAD_URL,
        data={'csv_file': (io.BytesIO(text.encode('utf-8')), filename)},
        headers=headers,
        content_type='multipart/form-data',
    )


def test_import_reports_good_and_bad_rows(client, inventory_headers, category, supplier):
    text = HEADER + (
        'Paracetamol 500mg,Analgesics,orders@accrapharma.com,5.00,3.50,100,10,2027-01-31\n'
        'Short Row,Analgesics,orders@accrapharma.com,5.00,3.50\n'
        ',,,,,,,\n'
        'Ghost,Analgesics,nobody@nowhere.com,1,1,1,1,2027-01-31\n'
        'Eye Drops,Eye Care,orders@accrapharma.com,12.00,8.00,20,,2027-05-01\n'
    )

    response = _upload(client, inventory_headers, text)

    assert response.status_code == 200
    body = response.get_json()
    assert body['imported_count'] == 2
    assert body['message'] == 'Successfully imported 2 products. 2 rows failed.'
    assert body['errors'] == [
        'Row 3: Insufficient data columns',
        "Row 5: Supplier with email 'nobody@nowhere.com' does not exist",
    ]


def test_unknown_category_is_created_and_row_still_imported(app, category, supplier):
    text = HEADER + 'Eye Drops,Eye Care,orders@accrapharma.com,12.00,8.00,20,,2027-05-01\n'

    result = ProductImportService.import_csv(text)

    assert result == {'message': 'Successfully imported 1 products', 'imported_count': 1}
    eye_care = Category.query.filter_by(name='Eye Care').one()
    assert eye_care.description == 'Imported category'

    product = Product.query.filter_by(name='Eye Drops').one()
    assert product.category_id == eye_care.id
    assert product.quantity_left == 20
    assert product.quantity_sold == 0
    assert product.reorder_level == 0
    assert product.profit == Decimal('4.00')
    assert product.total_profit == Decimal('80.00')


def test_row_validation_messages_are_joined(app, supplier):
    text = HEADER + 'Bad,Analgesics,orders@accrapharma.com,-1,abc,2.5,x,someday\n'

    result = ProductImportService.import_csv(text)

    assert result['imported_count'] == 0
    assert result['errors'] == [
        'Row 2: The selling_price field must be at least 0., '
        'The cost_price field must be a number., '
        'The total_quantity field must be an integer., '
        'The reorder_level field must be an integer., '
        'The expiry_date field must be a valid date.'
    ]


def test_validate_row_accepts_clean_row():
    row = {
        'name': 'Zinc', 'category_name': 'Vitamins', 'supplier_email': 'a@b.co',
        'selling_price': '2', 'cost_price': '1', 'total_quantity': '9',
        'reorder_level': '', 'expiry_date': '2027-01-01',
    }
    assert validate_row(row) == []


def test_header_only_file_imports_nothing(app):
    assert ProductImportService.import_csv(HEADER) == {
        'message': 'Successfully imported 0 products',
        'imported_count': 0,
    }


def test_file_is_required(client, inventory_headers):
    response = client.post(UPLOAD_URL, data={}, headers=inventory_headers, content_type='multipart/form-data')

    assert response.status_code == 422
    assert response.get_json()['errors']['csv_file'] == ['The csv_file field is required.']


def test_only_csv_or_txt_accepted(client, inventory_headers):
    response = _upload(client, inventory_headers, HEADER, filename='products.xlsx')

    assert response.status_code == 422
    assert response.get_json()['errors']['csv_file'] == ['The csv_file field must be a file of type: csv, txt.']


def test_cashier_cannot_import(client, cashier_headers):
    assert _upload(client, cashier_headers, HEADER).status_code == 403
