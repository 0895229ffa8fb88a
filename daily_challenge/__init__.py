# daily_challenge/__init__.py

from flask import Flask, jsonify
from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager

from config import Config

db = SQLAlchemy()
jwt = JWTManager()


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)

    # CORS: the browser client calls /api/*
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    # -----------------------------
    # JWT error handlers
    # -----------------------------
    @jwt.unauthorized_loader
    def unauthorized_callback(reason):
        return (
            jsonify(
                {
                    "message": "Missing or invalid auth token",
                    "error": reason,
                }
            ),
            401,
        )

    @jwt.invalid_token_loader
    def invalid_token_callback(reason):
        return (
            jsonify(
                {
                    "message": "Invalid auth token",
                    "error": reason,
                }
            ),
            422,
        )

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"message": "Token has expired"}), 401

    @app.errorhandler(404)
    def not_found(_error):
        return jsonify({"message": "not found"}), 404

    # -----------------------------
    # IMPORT BLUEPRINTS (all routes)
    # -----------------------------
    from .routes.user_routes import users_bp
    from .routes.challenge_routes import challenges_bp
    from .routes.progress_routes import progress_bp
    from .routes.leaderboard_routes import leaderboard_bp
    from .routes.template_routes import templates_bp

    # -----------------------------
    # REGISTER BLUEPRINTS
    # -----------------------------
    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(challenges_bp, url_prefix="/api/challenges")
    app.register_blueprint(progress_bp, url_prefix="/api/progress")
    app.register_blueprint(leaderboard_bp, url_prefix="/api/leaderboard")
    app.register_blueprint(templates_bp, url_prefix="/api/templates")

    @app.route("/api/health")
    def health():
        return {"status": "ok"}

    # -----------------------------
    # DB init
    # -----------------------------
    from .models.badge import seed_badges

    with app.app_context():
        db.create_all()
        seed_badges()

    return app
