from flask import Blueprint, request, jsonify, send_file, make_response, current_app
from src.exceptions import StockValidationError, PayloadValidationError, ResourceNotFoundException
from sales.sales_service import SalesService
from products.product_service import ProductService
from user.auth_middleware import require_role
from user.jwt_middleware import current_user_id
from user.user import CASHIER
import pandas as pd
import io
from datetime import datetime

bp = Blueprint("sales", __name__)


@bp.route("/products", methods=["GET"])
@require_role(CASHIER)
def fetch_all_products():
    return jsonify(ProductService.pos_products()), 200


@bp.route("/save/transaction", methods=["POST"])
@require_role(CASHIER)
def save_transaction():
    payload = request.get_json(silent=True)
    try:
        sale = SalesService.save_transaction(payload, user_id=current_user_id())
    except PayloadValidationError as e:
        return jsonify({
            "success": False,
            "message": "Validation failed",
            "errors": e.errors
        }), 422
    except StockValidationError as e:
        return jsonify({
            "success": False,
            "message": "Stock validation failed",
            "errors": e.errors
        }), 422
    except Exception as e:
        return jsonify({
            "success": False,
            "message": "Transaction failed. Please try again.",
            "error": str(e) if current_app.config.get("DEBUG") else "Internal server error"
        }), 500

    return jsonify({
        "success": True,
        "message": "Transaction saved successfully.",
        "sale_id": sale.id,
        "transaction_id": sale.transaction_id,
        "grand_total": str(sale.grand_total)
    }), 200


@bp.route("/transactions", methods=["GET"])
@require_role()
def list_transactions():
    return jsonify(SalesService.list_transactions()), 200


@bp.route("/transactions/<sale_id>/sale-items", methods=["GET"])
@require_role()
def get_sale_items(sale_id):
    try:
        return jsonify(SalesService.sale_items(sale_id)), 200
    except ResourceNotFoundException as e:
        return jsonify({"error": str(e)}), 404


@bp.route("/transactions/<sale_id>/details", methods=["GET"])
@require_role()
def get_transaction_details(sale_id):
    try:
        return jsonify(SalesService.transaction_details(sale_id)), 200
    except ResourceNotFoundException as e:
        return jsonify({"error": str(e)}), 404


@bp.route("/details", methods=["GET"])
@require_role()
def sales_details():
    return jsonify(SalesService.sales_details()), 200


@bp.route("/export", methods=["GET"])
@require_role()
def export_sales():
    format_type = request.args.get('format', 'csv').lower()
    rows = SalesService.sales_details()

    df = pd.DataFrame([{
        "Date": r["saleDate"],
        "Transaction ID": r["transactionId"],
        "Product": r["productName"],
        "Category": r["category"] or '',
        "Customer": r["customerName"] or '',
        "Quantity": r["quantity"],
        "Selling Price": r["sellingPrice"],
        "Total Amount": r["totalAmount"],
        "Profit": r["profit"],
        "Profit Margin (%)": r["profitMargin"],
        "Payment Method": r["paymentMethod"],
        "Sales Person": r["salesPerson"] or '',
    } for r in rows], columns=[
        "Date", "Transaction ID", "Product", "Category", "Customer", "Quantity", "Selling Price",
        "Total Amount", "Profit", "Profit Margin (%)", "Payment Method", "Sales Person",
    ])
    stamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")

    if format_type == 'excel':
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine='openpyxl') as writer:
            df.to_excel(writer, sheet_name='Sales', index=False)
        output.seek(0)
        return send_file(
            output,
            mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
            as_attachment=True,
            download_name=f'sales_export_{stamp}.xlsx'
        )

    output = io.StringIO()
    df.to_csv(output, index=False)
    response = make_response(output.getvalue())
    response.headers['Content-Type'] = 'text/csv; charset=utf-8'
    response.headers['Content-Disposition'] = f'attachment; filename=sales_export_{stamp}.csv'
    return response
