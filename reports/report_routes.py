from flask import Blueprint, request, jsonify, current_app
from datetime import datetime
from reports.dashboard_service import DashboardService, CashierDashboardService, get_date_range
from reports.report_service import ReportService
from user.auth_middleware import require_role, require_exact_role
from user.jwt_middleware import current_user_id
from user.user import User, CASHIER
from src.log import get_logger

bp = Blueprint("reports", __name__)

logger = get_logger("ReportRoutes")


def _error_detail(e):
    return str(e) if current_app.config.get("DEBUG") else "Internal server error"


def _parse_range_args():
    start_date = request.args.get('start_date')
    end_date = request.args.get('end_date')
    if not (start_date and end_date):
        return None, None
    start = datetime.strptime(start_date, "%Y-%m-%d").date()
    end = datetime.strptime(end_date, "%Y-%m-%d").date()
    if start > end:
        raise ValueError("start_date must not be after end_date")
    return start, end


@bp.route("/dashboard/data", methods=["GET"])
@require_role()
def get_dashboard_data():
    try:
        start_date, end_date = _parse_range_args()
    except ValueError as e:
        return jsonify({"error": f"Invalid date range: {e}"}), 400

    time_range = request.args.get('timeRange', '7d')
    try:
        data = DashboardService().build(time_range, start_date, end_date)
    except Exception as e:
        logger.exception("Dashboard data failed for range %s", time_range)
        return jsonify({"error": "Failed to load dashboard data", "message": _error_detail(e)}), 500
    return jsonify(data), 200


@bp.route("/reports/sales", methods=["GET"])
@require_role()
def get_sales_report():
    try:
        start_date, end_date = _parse_range_args()
    except ValueError as e:
        return jsonify({"error": f"Invalid date range: {e}"}), 400

    start = end = None
    if start_date and end_date:
        start, end = get_date_range(None, start_date=start_date, end_date=end_date)
    try:
        report_data = ReportService.generate_sales_report(start, end)
    except Exception as e:
        logger.exception("Sales report failed")
        return jsonify({"error": "Failed to load sales report", "message": _error_detail(e)}), 500
    return jsonify(report_data), 200


@bp.route("/cashier/dashboard/data", methods=["GET"])
@require_exact_role(CASHIER)
def get_cashier_dashboard_data():
    cashier = User.query.get(current_user_id())
    time_range = request.args.get('timeRange', 'today')
    try:
        data = CashierDashboardService(cashier).build(time_range)
    except Exception as e:
        logger.exception("Cashier dashboard failed for user %s", cashier.id)
        return jsonify({"error": "Failed to load dashboard data", "message": _error_detail(e)}), 500
    return jsonify(data), 200
