import logging

from flask import Flask, jsonify

from library_app.config import Config
from library_app.extensions import db, jwt, mail, migrate


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    if not app.debug and not app.testing:
        app.logger.setLevel(logging.INFO)

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    mail.init_app(app)

    # registers the JWT user loader and the 401 handlers
    import library_app.utils.auth  # noqa: F401

    from library_app.models import book, borrow, fine, notification_log, user  # noqa: F401

    with app.app_context():
        db.create_all()

    from library_app.controllers.auth_controller import auth_bp
    from library_app.controllers.book_controller import book_bp
    from library_app.controllers.borrow_controller import borrow_bp
    from library_app.controllers.fine_controller import fine_bp
    from library_app.controllers.user_controller import user_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(book_bp, url_prefix="/books")
    app.register_blueprint(borrow_bp, url_prefix="/borrows")
    app.register_blueprint(fine_bp, url_prefix="/fines")
    app.register_blueprint(user_bp, url_prefix="/users")

    @app.get("/health")
    def health():
        return jsonify({"success": True, "message": "ok"})

    @app.errorhandler(404)
    def not_found(_e):
        return jsonify({"success": False, "message": "Route not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(_e):
        return jsonify({"success": False, "message": "Method not allowed"}), 405

    @app.errorhandler(500)
    def server_error(e):
        app.logger.exception(f"[app] unhandled error: {e}")
        return jsonify({"success": False, "message": "Internal server error"}), 500

    from library_app.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app
