from flask import Flask

from storefront.modules.auth.routes import bp as auth_bp
from storefront.modules.catalog.routes import bp as catalog_bp
from storefront.modules.cart.routes import bp as cart_bp
from storefront.modules.comments.routes import bp as comments_bp


def register_api_blueprints(app: Flask) -> None:
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(catalog_bp, url_prefix="/api")
    app.register_blueprint(cart_bp, url_prefix="/api")
    app.register_blueprint(comments_bp, url_prefix="/api")

    # Root API document
    @app.get("/api")
    def api_index():
        return {
            "name": "Storefront API",
            "version": "0.1.0",
            "backend": app.config["BACKEND_URL"],
            "endpoints": {
                "auth": ["/auth/login", "/auth/logout", "/session"],
                "catalog": ["/products", "/products/<id>"],
                "cart": ["/cart", "/cart/items", "/cart/items/<item_id>", "/cart/clear"],
                "comments": ["/products/<id>/comments"],
            },
        }, 200
