def register_routes(app):
    from sales.sales_routes import bp as sales_bp
    app.register_blueprint(sales_bp, url_prefix="/sales")

    from products.product_routes import bp as product_bp
    app.register_blueprint(product_bp, url_prefix="/products")

    from products.import_routes import bp as import_bp
    app.register_blueprint(import_bp, url_prefix="/imports")

    from category.category_routes import bp as category_bp
    app.register_blueprint(category_bp, url_prefix="/categories")

    from suppliers.supplier_routes import bp as supplier_bp
    app.register_blueprint(supplier_bp, url_prefix="/suppliers")

    from reports.report_routes import bp as report_bp
    app.register_blueprint(report_bp, url_prefix="")

    from settings.settings_routes import bp as settings_bp
    app.register_blueprint(settings_bp, url_prefix="/settings")

    from user.user_routes import bp as user_bp
    app.register_blueprint(user_bp, url_prefix="")
