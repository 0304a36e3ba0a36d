from flask import Flask, jsonify
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from .errors import Evalu8Error
from .extensions import db, login_manager, rq, turn_lock

migrate = Migrate()


def init_services(app):
    """Build the model gateway once and hand it to the conductor and scorer."""
    from .services.model_gateway import ModelGateway
    from .services.conductor import InterviewConductor
    from .services.scorer import EvaluationScorer
    from .services.lifecycle import ApplicationLifecycle

    gateway = app.extensions.get("evalu8.gateway") or ModelGateway.from_config(app.config)
    app.extensions["evalu8.gateway"] = gateway
    app.extensions["evalu8.lifecycle"] = ApplicationLifecycle(
        conductor=InterviewConductor(gateway),
        scorer=EvaluationScorer(gateway),
        lock=turn_lock,
    )


def register_error_handlers(app):
    @app.errorhandler(Evalu8Error)
    def handle_domain_error(e):
        return jsonify({"message": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        app.logger.exception("Unhandled error")
        db.session.rollback()
        return jsonify({"message": "Internal server error"}), 500


def create_app(config_object="config.Config", gateway=None):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    rq.init_app(app)
    turn_lock.init_app(app)

    if gateway is not None:
        app.extensions["evalu8.gateway"] = gateway
    init_services(app)

    @login_manager.user_loader
    def load_user(user_id):
        from .models.user import User
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"message": "Unauthorized"}), 401

    from .blueprints.auth import bp as auth_bp
    from .blueprints.jobs import bp as jobs_bp
    from .blueprints.public import bp as public_bp
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(jobs_bp, url_prefix="/api")
    app.register_blueprint(public_bp, url_prefix="/api/public")

    register_error_handlers(app)

    @app.get("/healthz")
    def healthz():
        return jsonify({"ok": True})

    return app
