from sqlalchemy import func, desc
from src.extensions import db
from sales.sale import Sale, SaleItem
from category.category import Category


class ReportService:
    @staticmethod
    def generate_sales_report(start=None, end=None):
        """Best sellers by revenue and a per-category revenue/profit breakdown."""
        total_sales = func.sum(SaleItem.total_amount).label('total_sales')
        total_profit = func.sum(SaleItem.profit).label('total_profit')

        top_query = (
            db.session.query(
                SaleItem.product_name,
                Category.name.label('category'),
                func.sum(SaleItem.quantity).label('total_quantity'),
                total_sales,
                total_profit,
            )
            .join(Sale, SaleItem.sale_id == Sale.id)
            .outerjoin(Category, SaleItem.category_id == Category.id)
        )
        category_query = (
            db.session.query(Category.name.label('category'), total_sales, total_profit)
            .select_from(SaleItem)
            .join(Sale, SaleItem.sale_id == Sale.id)
            .outerjoin(Category, SaleItem.category_id == Category.id)
        )
        if start is not None and end is not None:
            top_query = top_query.filter(Sale.created_at.between(start, end))
            category_query = category_query.filter(Sale.created_at.between(start, end))

        top_products = (top_query
                        .group_by(SaleItem.product_name, Category.name)
                        .order_by(desc('total_sales'))
                        .limit(5)
                        .all())
        by_category = (category_query
                       .group_by(Category.name)
                       .order_by(desc('total_sales'))
                       .all())

        return {
            "topProducts": [{
                "productName": row.product_name,
                "category": row.category or "Unknown Category",
                "totalQuantity": int(row.total_quantity or 0),
                "totalSales": float(row.total_sales or 0),
                "totalProfit": float(row.total_profit or 0),
            } for row in top_products],
            "salesByCategory": [{
                "category": row.category or "Unknown Category",
                "totalSales": float(row.total_sales or 0),
                "totalProfit": float(row.total_profit or 0),
            } for row in by_category],
        }
