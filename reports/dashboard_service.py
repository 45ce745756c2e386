from datetime import datetime, date, time, timedelta
from flask import current_app
from sqlalchemy import func, extract, desc
from src.extensions import db
from sales.sale import Sale, SaleItem
from sales.sales_service import format_payment_method
from products.product import Product
from category.category import Category
from user.user import User
from reports.targets import MonthlyTargetPolicy, DailyTargetPolicy

CATEGORY_COLORS = ['#3B82F6', '#10B981', '#F59E0B', '#8B5CF6', '#6B7280']

# Rolling windows in days
TIME_RANGES = {'7d': 7, '30d': 30, '90d': 90}

FINANCIAL_YEAR_START_MONTH = 4


def start_of_day(day):
    return datetime.combine(day, time.min)


def end_of_day(day):
    return datetime.combine(day, time.max)


def clock(dt):
    """12-hour clock without a leading zero, e.g. 9:05 AM."""
    return f"{dt.hour % 12 or 12}:{dt.strftime('%M')} {'AM' if dt.hour < 12 else 'PM'}"


def hour_label(hour):
    return f"{hour % 12 or 12} {'AM' if hour < 12 else 'PM'}"


def get_date_range(time_range, now=None, start_date=None, end_date=None):
    """[start, end] datetimes for a rolling window or an explicit custom range."""
    now = now or datetime.utcnow()
    if start_date and end_date:
        return start_of_day(start_date), end_of_day(end_date)
    days = TIME_RANGES.get(time_range, 7)
    return start_of_day((now - timedelta(days=days)).date()), end_of_day(now.date())


def get_previous_date_range(time_range, now=None, start_date=None, end_date=None):
    now = now or datetime.utcnow()
    if start_date and end_date:
        length = (end_date - start_date).days + 1
        return (start_of_day(start_date - timedelta(days=length)),
                end_of_day(start_date - timedelta(days=1)))
    days = TIME_RANGES.get(time_range, 7)
    return (start_of_day((now - timedelta(days=days * 2)).date()),
            end_of_day((now - timedelta(days=days)).date()))


def percent_change(current, previous):
    if not previous:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


def format_money(amount, currency=None):
    currency = currency or current_app.config.get("CURRENCY", "GHS")
    return f"{currency} {amount:,.2f}"


def category_shares(category_totals):
    """Percentage share per category.

    ``category_totals`` is a list of (name, amount) pairs, largest first.
    With more than five categories the first four are kept and the rest
    are folded into an "Others" slice.
    """
    total = sum(amount for _, amount in category_totals)
    data = []
    for index, (name, amount) in enumerate(category_totals):
        percentage = (amount / total) * 100 if total > 0 else 0
        data.append({
            'name': name,
            'value': round(percentage, 1),
            'color': CATEGORY_COLORS[index % len(CATEGORY_COLORS)],
        })

    if len(data) > 5:
        others = round(sum(c['value'] for c in data[4:]), 1)
        data = data[:4] + [{'name': 'Others', 'value': others, 'color': CATEGORY_COLORS[4]}]
    return data


def financial_year_start(today):
    year = today.year if today.month >= FINANCIAL_YEAR_START_MONTH else today.year - 1
    return date(year, FINANCIAL_YEAR_START_MONTH, 1)


def add_months(day, months):
    month_index = day.month - 1 + months
    return date(day.year + month_index // 12, month_index % 12 + 1, 1)


def _day_key(value):
    # SQLite hands back 'YYYY-MM-DD' strings, PostgreSQL hands back dates
    return str(value)[:10]


class SalesAggregates:
    """Aggregation queries over sales, optionally scoped to a single cashier."""

    def __init__(self, user_id=None, now=None):
        self.user_id = user_id
        self.now = now or datetime.utcnow()

    def _scoped(self, query, start=None, end=None):
        if start is not None and end is not None:
            query = query.filter(Sale.created_at.between(start, end))
        if self.user_id is not None:
            query = query.filter(Sale.user_id == self.user_id)
        return query

    def revenue(self, start, end):
        query = db.session.query(func.coalesce(func.sum(Sale.grand_total), 0))
        return float(self._scoped(query, start, end).scalar() or 0)

    def transaction_count(self, start, end):
        return self._scoped(db.session.query(func.count(Sale.id)), start, end).scalar() or 0

    def items_sold(self, start, end):
        query = db.session.query(func.coalesce(func.sum(SaleItem.quantity), 0)).join(Sale, SaleItem.sale_id == Sale.id)
        return int(self._scoped(query, start, end).scalar() or 0)

    def customer_count(self, start, end):
        query = db.session.query(func.count(func.distinct(Sale.customer_name))).filter(
            Sale.customer_name.isnot(None),
            Sale.customer_name != '',
        )
        return self._scoped(query, start, end).scalar() or 0

    def daily_totals(self, start, end):
        day = func.date(Sale.created_at)
        query = db.session.query(
            day.label('day'),
            func.sum(Sale.grand_total).label('sales'),
            func.count(Sale.id).label('transactions'),
        )
        rows = self._scoped(query, start, end).group_by(day).all()
        return {_day_key(r.day): (float(r.sales or 0), int(r.transactions)) for r in rows}

    def daily_series(self, start, end, label_format):
        """One entry per calendar day between start and end, zero-filled."""
        totals = self.daily_totals(start, end)
        series = []
        current = start.date()
        while current <= end.date():
            sales, transactions = totals.get(current.isoformat(), (0.0, 0))
            series.append({
                'date': current.strftime(label_format),
                'sales': sales,
                'transactions': transactions,
            })
            current += timedelta(days=1)
        return series

    def monthly_totals(self, start, end):
        year = extract('year', Sale.created_at)
        month = extract('month', Sale.created_at)
        query = db.session.query(
            year.label('year'),
            month.label('month'),
            func.sum(Sale.grand_total).label('sales'),
        )
        rows = self._scoped(query, start, end).group_by(year, month).all()
        return {(int(r.year), int(r.month)): float(r.sales or 0) for r in rows}

    def category_data(self, start, end):
        query = db.session.query(
            SaleItem.category_id,
            func.sum(SaleItem.total_amount).label('total_sales'),
        ).join(Sale, SaleItem.sale_id == Sale.id)
        rows = (self._scoped(query, start, end)
                .group_by(SaleItem.category_id)
                .order_by(desc('total_sales'))
                .all())

        ids = [r.category_id for r in rows if r.category_id is not None]
        names = dict(db.session.query(Category.id, Category.name).filter(Category.id.in_(ids)).all()) if ids else {}

        return category_shares([
            (names.get(r.category_id, 'Unknown Category'), float(r.total_sales or 0)) for r in rows
        ])

    def top_products(self, start, end, limit=5):
        total_quantity = func.sum(SaleItem.quantity).label('total_quantity')
        query = db.session.query(
            SaleItem.product_name,
            total_quantity,
            func.sum(SaleItem.total_amount).label('total_revenue'),
        ).join(Sale, SaleItem.sale_id == Sale.id)
        rows = (self._scoped(query, start, end)
                .group_by(SaleItem.product_name)
                .order_by(desc('total_quantity'))
                .limit(limit)
                .all())
        return [{
            'name': r.product_name,
            'quantity': int(r.total_quantity or 0),
            'revenue': float(r.total_revenue or 0),
        } for r in rows]

    def recent_transactions(self, limit=5, time_format=None):
        query = self._scoped(Sale.query).order_by(Sale.created_at.desc()).limit(limit)
        return [{
            'id': '#TXN-' + sale.id[:8],
            'transactionId': sale.transaction_id,
            'time': time_format(sale.created_at) if time_format else f"{sale.created_at.strftime('%b %d')}, {clock(sale.created_at)}",
            'items': sum(item.quantity for item in sale.sale_items),
            'amount': float(sale.grand_total),
            'payment': format_payment_method(sale.payment_method),
        } for sale in query.all()]

    def payment_methods(self, start, end):
        query = db.session.query(
            Sale.payment_method,
            func.count(Sale.id).label('count'),
            func.sum(Sale.grand_total).label('amount'),
        )
        rows = self._scoped(query, start, end).group_by(Sale.payment_method).all()
        total = sum(float(r.amount or 0) for r in rows)
        return [{
            'method': format_payment_method(r.payment_method),
            'count': int(r.count),
            'amount': float(r.amount or 0),
            'percentage': round(float(r.amount or 0) / total * 100, 1) if total > 0 else 0,
        } for r in rows]


class DashboardService(SalesAggregates):
    """Store-wide dashboard for admins."""

    def __init__(self, now=None, target_policy=None):
        super().__init__(user_id=None, now=now)
        self.target_policy = target_policy or MonthlyTargetPolicy.from_config()

    def build(self, time_range='7d', start_date=None, end_date=None):
        date_range = get_date_range(time_range, self.now, start_date, end_date)
        previous_range = get_previous_date_range(time_range, self.now, start_date, end_date)
        return {
            'metrics': self.metrics(date_range, previous_range),
            'salesTrend': self.daily_series(date_range[0], date_range[1], '%a'),
            'categoryData': self.category_data(*date_range),
            'topProducts': self.top_products(*date_range),
            'recentTransactions': self.recent_transactions(limit=5),
            'last30DaysSales': self.last_30_days_sales(),
            'financialYearSales': self.financial_year_sales(),
        }

    def metrics(self, date_range, previous_range):
        today = self.now.date()
        yesterday = today - timedelta(days=1)

        today_sales = self.revenue(start_of_day(today), end_of_day(today))
        yesterday_sales = self.revenue(start_of_day(yesterday), end_of_day(yesterday))
        total_revenue = self.revenue(*date_range)
        total_transactions = self.transaction_count(*date_range)
        avg_transaction = total_revenue / total_transactions if total_transactions > 0 else 0

        previous_revenue = self.revenue(*previous_range)
        previous_transactions = self.transaction_count(*previous_range)

        return [
            {'title': "Today's Sales", 'value': format_money(today_sales),
             'change': percent_change(today_sales, yesterday_sales)},
            {'title': "Yesterday's Sales", 'value': format_money(yesterday_sales), 'change': 0},
            {'title': 'Total Revenue', 'value': format_money(total_revenue),
             'change': percent_change(total_revenue, previous_revenue)},
            {'title': 'Total Products', 'value': f"{Product.query.count():,}", 'change': 0},
            {'title': 'Transactions', 'value': f"{total_transactions:,}",
             'change': percent_change(total_transactions, previous_transactions)},
            {'title': 'Avg Transaction', 'value': format_money(avg_transaction), 'change': 0},
            {'title': 'Customers', 'value': f"{self.customer_count(*date_range):,}", 'change': 0},
            {'title': 'Users', 'value': f"{User.query.count():,}", 'change': 0},
        ]

    def last_30_days_sales(self):
        start = start_of_day((self.now - timedelta(days=29)).date())
        end = end_of_day(self.now.date())
        return self.daily_series(start, end, '%b %d')

    def financial_year_sales(self):
        """Twelve months from April with a target and achievement per month."""
        fy_start = financial_year_start(self.now.date())
        fy_end = add_months(fy_start, 12) - timedelta(days=1)

        # One extra month in front so April's target can look back at March
        totals = self.monthly_totals(start_of_day(add_months(fy_start, -1)), end_of_day(fy_end))

        result = []
        for offset in range(12):
            month_start = add_months(fy_start, offset)
            previous = add_months(fy_start, offset - 1)
            sales = totals.get((month_start.year, month_start.month), 0.0)
            previous_sales = totals.get((previous.year, previous.month), 0.0)
            target = self.target_policy.target(month_start.month, previous_sales)
            result.append({
                'month': month_start.strftime('%b %Y'),
                'sales': sales,
                'target': target,
                'achievement': round(sales / target * 100, 1) if target > 0 else 0,
            })
        return result


class CashierDashboardService(SalesAggregates):
    """Shift view for one cashier; every figure is limited to their own sales."""

    TIME_RANGES = ('today', 'week', 'month')

    def __init__(self, cashier, now=None, target_policy=None):
        super().__init__(user_id=cashier.id, now=now)
        self.cashier = cashier
        self.target_policy = target_policy or DailyTargetPolicy.from_config()

    def get_date_range(self, time_range):
        today = self.now.date()
        if time_range == 'week':
            return start_of_day(today - timedelta(days=today.weekday())), end_of_day(today)
        if time_range == 'month':
            return start_of_day(today.replace(day=1)), end_of_day(today)
        return start_of_day(today), end_of_day(today)

    def build(self, time_range='today'):
        if time_range not in self.TIME_RANGES:
            time_range = 'today'
        date_range = self.get_date_range(time_range)
        return {
            'cashierInfo': self.cashier_info(),
            'shiftMetrics': self.shift_metrics(date_range),
            'shiftSalesTrend': self.shift_sales_trend(time_range, date_range),
            'shiftCategoryData': self.category_data(*date_range),
            'shiftTopProducts': self.top_products(*date_range),
            'recentShiftTransactions': self.recent_transactions(limit=10, time_format=clock),
            'dailyPerformance': self.daily_performance(),
            'paymentMethods': self.payment_methods(*date_range),
        }

    def _shift_start(self):
        return self.cashier.last_login_at or (self.now - timedelta(hours=8))

    def _shift_duration(self):
        seconds = max(int((self.now - self._shift_start()).total_seconds()), 0)
        return f"{seconds // 3600}h {(seconds % 3600) // 60}m"

    def cashier_info(self):
        day = func.date(Sale.created_at)
        total_shifts = db.session.query(func.count(func.distinct(day))).filter(
            Sale.user_id == self.cashier.id
        ).scalar() or 0
        return {
            'name': self.cashier.name,
            'id': f"CSH-{self.cashier.id:03d}",
            'shiftStart': clock(self._shift_start()),
            'shiftDuration': self._shift_duration(),
            'totalShifts': total_shifts,
        }

    def shift_metrics(self, date_range):
        today = self.now.date()
        yesterday = today - timedelta(days=1)

        today_sales = self.revenue(start_of_day(today), end_of_day(today))
        yesterday_sales = self.revenue(start_of_day(yesterday), end_of_day(yesterday))
        range_sales = self.revenue(*date_range)
        transactions = self.transaction_count(*date_range)
        yesterday_transactions = self.transaction_count(start_of_day(yesterday), end_of_day(yesterday))
        avg_transaction = range_sales / transactions if transactions > 0 else 0

        return [
            {'title': "Today's Sales", 'value': format_money(today_sales),
             'change': percent_change(today_sales, yesterday_sales)},
            {'title': 'Transactions', 'value': f"{transactions:,}",
             'change': percent_change(transactions, yesterday_transactions)},
            {'title': 'Avg Transaction', 'value': format_money(avg_transaction), 'change': 0},
            {'title': 'Items Sold', 'value': f"{self.items_sold(start_of_day(today), end_of_day(today)):,}", 'change': 0},
            {'title': 'Shift Duration', 'value': self._shift_duration(), 'change': 0},
        ]

    def shift_sales_trend(self, time_range, date_range):
        if time_range != 'today':
            return self.daily_series(date_range[0], date_range[1], '%b %d')

        hour = extract('hour', Sale.created_at)
        query = db.session.query(
            hour.label('hour'),
            func.sum(Sale.grand_total).label('sales'),
            func.count(Sale.id).label('transactions'),
        )
        rows = self._scoped(query, *date_range).group_by(hour).all()
        by_hour = {int(r.hour): (float(r.sales or 0), int(r.transactions)) for r in rows}
        return [{
            'date': hour_label(h),
            'sales': by_hour.get(h, (0.0, 0))[0],
            'transactions': by_hour.get(h, (0.0, 0))[1],
        } for h in range(24)]

    def daily_performance(self):
        start = start_of_day((self.now - timedelta(days=6)).date())
        end = end_of_day(self.now.date())
        totals = self.daily_totals(start, end)

        result = []
        current = start.date()
        while current <= end.date():
            result.append({
                'day': current.strftime('%a'),
                'sales': totals.get(current.isoformat(), (0.0, 0))[0],
                'target': self.target_policy.target(current),
            })
            current += timedelta(days=1)
        return result
