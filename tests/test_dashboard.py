"""
Dashboard aggregation: pure helpers, target policies, and the admin,
cashier and sales-report endpoints over recorded sales.
"""

import pytest
from datetime import datetime, date, timedelta
from decimal import Decimal

from src.extensions import db
from sales.sale import Sale
from sales.sales_service import SalesService, generate_transaction_id
from reports.dashboard_service import (
    DashboardService, category_shares, get_date_range, get_previous_date_range,
    percent_change, financial_year_start, clock, CATEGORY_COLORS,
)
from reports.targets import MonthlyTargetPolicy, DailyTargetPolicy
from user.user import CASHIER

from conftest import checkout_payload, bearer

NOW = datetime(2026, 5, 10, 14, 30)


# =============================================================================
# PURE HELPERS
# =============================================================================

def test_category_shares_folds_the_tail_into_others():
    totals = [('A', 400), ('B', 200), ('C', 150), ('D', 100), ('E', 100), ('F', 50)]

    shares = category_shares(totals)

    assert [s['name'] for s in shares] == ['A', 'B', 'C', 'D', 'Others']
    assert shares[0] == {'name': 'A', 'value': 40.0, 'color': CATEGORY_COLORS[0]}
    assert shares[-1] == {'name': 'Others', 'value': 15.0, 'color': CATEGORY_COLORS[4]}


def test_category_shares_keeps_five_or_fewer():
    shares = category_shares([('A', 1), ('B', 1), ('C', 1), ('D', 1), ('E', 0)])

    assert len(shares) == 5
    assert shares[4]['name'] == 'E'


def test_category_shares_with_no_revenue():
    assert category_shares([('A', 0)]) == [{'name': 'A', 'value': 0, 'color': CATEGORY_COLORS[0]}]


def test_rolling_and_custom_ranges():
    start, end = get_date_range('7d', now=NOW)
    assert start == datetime(2026, 5, 3)
    assert end.date() == date(2026, 5, 10) and end.hour == 23

    assert get_date_range('bogus', now=NOW)[0] == datetime(2026, 5, 3)
    assert get_date_range('90d', now=NOW)[0] == datetime(2026, 2, 9)

    custom = get_date_range(None, now=NOW, start_date=date(2026, 4, 1), end_date=date(2026, 4, 10))
    assert custom[0] == datetime(2026, 4, 1)
    assert custom[1].date() == date(2026, 4, 10)


def test_previous_ranges():
    start, end = get_previous_date_range('7d', now=NOW)
    assert start == datetime(2026, 4, 26)
    assert end.date() == date(2026, 5, 3)

    start, end = get_previous_date_range(None, now=NOW, start_date=date(2026, 4, 1), end_date=date(2026, 4, 10))
    assert start == datetime(2026, 3, 22)
    assert end.date() == date(2026, 3, 31)


@pytest.mark.parametrize('current, previous, change', [
    (150, 100, 50.0),
    (50, 100, -50.0),
    (10, 0, 100.0),
    (0, 0, 0.0),
])
def test_percent_change(current, previous, change):
    assert percent_change(current, previous) == change


def test_financial_year_starts_in_april():
    assert financial_year_start(date(2026, 3, 31)) == date(2025, 4, 1)
    assert financial_year_start(date(2026, 4, 1)) == date(2026, 4, 1)


def test_clock_format():
    assert clock(datetime(2026, 1, 1, 9, 5)) == '9:05 AM'
    assert clock(datetime(2026, 1, 1, 0, 15)) == '12:15 AM'
    assert clock(datetime(2026, 1, 1, 13, 0)) == '1:00 PM'


def test_monthly_target_policy():
    policy = MonthlyTargetPolicy()

    assert policy.target(11, previous_month_sales=99999) == 10400.0
    assert policy.target(12) == 12000.0
    assert policy.target(5, previous_month_sales=5000) == 5500.0
    assert policy.target(5, previous_month_sales=0) == 8000.0


def test_monthly_target_policy_reads_config(app):
    app.config['MONTHLY_TARGET_BASE'] = 100
    app.config['MONTHLY_TARGET_MULTIPLIERS'] = {1: 2}

    policy = MonthlyTargetPolicy.from_config()

    assert policy.target(1) == 200.0
    assert policy.target(12) == 100.0


def test_daily_target_policy():
    policy = DailyTargetPolicy()

    assert policy.target(date(2026, 3, 14)) == 1200.0  # Saturday
    assert policy.target(date(2026, 3, 16)) == 1000.0  # Monday


# =============================================================================
# ADMIN DASHBOARD
# =============================================================================

def _insert_sale(total, created_at, user_id=None):
    sale = Sale(
        transaction_id=generate_transaction_id(now=created_at),
        user_id=user_id,
        sub_total=Decimal(total),
        discount_amount=Decimal('0'),
        grand_total=Decimal(total),
        amount_paid=Decimal(total),
        change_amount=Decimal('0'),
        payment_method='cash',
        created_at=created_at,
    )
    db.session.add(sale)
    db.session.commit()
    return sale


def test_dashboard_payload(client, admin_headers, cashier_user, product):
    SalesService.save_transaction(checkout_payload([(product, 2)], customer_name='Esi'), user_id=cashier_user.id)
    SalesService.save_transaction(checkout_payload([(product, 1)], payment_method='momo'), user_id=cashier_user.id)

    response = client.get('/dashboard/data?timeRange=7d', headers=admin_headers)

    assert response.status_code == 200
    data = response.get_json()

    metrics = {m['title']: m for m in data['metrics']}
    assert len(data['metrics']) == 8
    assert metrics["Today's Sales"]['value'] == 'GHS 30.00'
    assert metrics["Today's Sales"]['change'] == 100.0
    assert metrics['Transactions']['value'] == '2'
    assert metrics['Avg Transaction']['value'] == 'GHS 15.00'
    assert metrics['Customers']['value'] == '1'
    assert metrics['Total Products']['value'] == '1'

    assert len(data['salesTrend']) == 8
    assert sum(d['sales'] for d in data['salesTrend']) == 30.0
    assert data['categoryData'] == [{'name': 'Analgesics', 'value': 100.0, 'color': CATEGORY_COLORS[0]}]
    assert data['topProducts'] == [{'name': 'Paracetamol', 'quantity': 3, 'revenue': 30.0}]

    recent = data['recentTransactions']
    assert len(recent) == 2
    assert all(r['id'].startswith('#TXN-') and len(r['id']) == 13 for r in recent)
    assert {r['payment'] for r in recent} == {'Cash', 'Mobile Money'}

    assert len(data['last30DaysSales']) == 30
    assert data['last30DaysSales'][-1]['sales'] == 30.0
    assert len(data['financialYearSales']) == 12
    assert data['financialYearSales'][0]['month'].startswith('Apr')


def test_dashboard_rejects_bad_custom_range(client, admin_headers):
    response = client.get('/dashboard/data?start_date=2026-05-10&end_date=2026-05-01', headers=admin_headers)

    assert response.status_code == 400


def test_dashboard_failure_hides_details(client, admin_headers, monkeypatch):
    def broken(self, *args, **kwargs):
        raise RuntimeError('connection to postgres://pos:secret@db failed')

    monkeypatch.setattr(DashboardService, 'build', broken)

    response = client.get('/dashboard/data', headers=admin_headers)

    assert response.status_code == 500
    body = response.get_json()
    assert body['message'] == 'Internal server error'
    assert 'secret' not in response.get_data(as_text=True)


def test_dashboard_is_admin_only(client, cashier_headers):
    assert client.get('/dashboard/data', headers=cashier_headers).status_code == 403


def test_financial_year_targets_follow_previous_month(app):
    _insert_sale('1000.00', datetime(2026, 3, 20, 10))
    _insert_sale('2200.00', datetime(2026, 4, 15, 10))
    _insert_sale('500.00', datetime(2026, 5, 2, 10))

    months = DashboardService(now=NOW).financial_year_sales()

    april, may, june = months[0], months[1], months[2]
    assert april == {'month': 'Apr 2026', 'sales': 2200.0, 'target': 1100.0, 'achievement': 200.0}
    assert may['target'] == 2420.0
    assert may['sales'] == 500.0
    assert june['target'] == 550.0
    assert months[7]['month'] == 'Nov 2026'
    assert months[7]['target'] == 10400.0
    assert months[-1]['month'] == 'Mar 2027'


def test_metrics_compare_with_previous_window(app, product):
    _insert_sale('100.00', datetime(2026, 5, 9, 9))
    _insert_sale('50.00', datetime(2026, 4, 28, 9))

    service = DashboardService(now=NOW)
    metrics = {m['title']: m for m in service.metrics(get_date_range('7d', NOW), get_previous_date_range('7d', NOW))}

    assert metrics["Yesterday's Sales"]['value'] == 'GHS 100.00'
    assert metrics["Today's Sales"]['change'] == -100.0
    assert metrics['Total Revenue']['change'] == 100.0


# =============================================================================
# CASHIER DASHBOARD
# =============================================================================

def test_cashier_dashboard_only_counts_own_sales(client, make_user, cashier_user, cashier_headers, product):
    colleague = make_user(CASHIER, email='colleague@example.com')
    SalesService.save_transaction(checkout_payload([(product, 2)]), user_id=cashier_user.id)
    SalesService.save_transaction(checkout_payload([(product, 5)]), user_id=colleague.id)

    response = client.get('/cashier/dashboard/data?timeRange=today', headers=cashier_headers)

    assert response.status_code == 200
    data = response.get_json()
    assert data['cashierInfo']['name'] == 'Ama Mensah'
    assert data['cashierInfo']['id'] == f'CSH-{cashier_user.id:03d}'
    assert data['cashierInfo']['totalShifts'] == 1

    assert len(data['shiftSalesTrend']) == 24
    assert sum(h['sales'] for h in data['shiftSalesTrend']) == 20.0
    assert data['shiftTopProducts'] == [{'name': 'Paracetamol', 'quantity': 2, 'revenue': 20.0}]
    assert len(data['recentShiftTransactions']) == 1
    assert data['paymentMethods'] == [{'method': 'Cash', 'count': 1, 'amount': 20.0, 'percentage': 100.0}]
    assert len(data['dailyPerformance']) == 7

    metrics = {m['title']: m['value'] for m in data['shiftMetrics']}
    assert metrics["Today's Sales"] == 'GHS 20.00'
    assert metrics['Items Sold'] == '2'


def test_cashier_week_view_is_daily(client, cashier_headers, cashier_user, product):
    SalesService.save_transaction(checkout_payload([(product, 1)]), user_id=cashier_user.id)

    data = client.get('/cashier/dashboard/data?timeRange=week', headers=cashier_headers).get_json()

    assert 1 <= len(data['shiftSalesTrend']) <= 7
    assert data['shiftSalesTrend'][-1]['sales'] == 10.0


def test_cashier_dashboard_is_cashier_only(client, admin_headers):
    assert client.get('/cashier/dashboard/data', headers=admin_headers).status_code == 403


def test_login_time_sets_shift_start(client, app, make_user, product):
    make_user(CASHIER, email='shift@example.com', password='secret123')
    login = client.post('/login', json={'email': 'shift@example.com', 'password': 'secret123'}).get_json()

    data = client.get(
        '/cashier/dashboard/data',
        headers={'Authorization': f"Bearer {login['access_token']}"},
    ).get_json()

    assert data['cashierInfo']['shiftDuration'] == '0h 0m'


# =============================================================================
# SALES REPORT
# =============================================================================

def test_sales_report(client, admin_headers, cashier_user, make_product, category):
    pain = make_product(name='Paracetamol', quantity=20)
    vitamins = make_product(name='Vitamin C', quantity=20, selling_price='4.00', cost_price='1.00')
    SalesService.save_transaction(checkout_payload([(pain, 3), (vitamins, 5)]), user_id=cashier_user.id)

    data = client.get('/reports/sales', headers=admin_headers).get_json()

    assert [p['productName'] for p in data['topProducts']] == ['Paracetamol', 'Vitamin C']
    assert data['topProducts'][0] == {
        'productName': 'Paracetamol', 'category': 'Analgesics',
        'totalQuantity': 3, 'totalSales': 30.0, 'totalProfit': 12.0,
    }
    assert data['salesByCategory'] == [{'category': 'Analgesics', 'totalSales': 50.0, 'totalProfit': 27.0}]
