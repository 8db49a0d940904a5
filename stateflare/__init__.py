from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from dotenv import load_dotenv

db = SQLAlchemy()
migrate = Migrate()


def create_app(test_config=None) -> Flask:
    load_dotenv()

    app = Flask(__name__)
    app.config.from_object("stateflare.config.Config")
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite"):
        engine_options = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
        connect_args = dict(engine_options.get("connect_args") or {})
        connect_args.setdefault("timeout", app.config["SQLITE_BUSY_TIMEOUT"])
        engine_options["connect_args"] = connect_args
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options

    from stateflare.stats import StatsConfigError, validate_stats_mode

    try:
        app.config["STATS_MODE"] = validate_stats_mode(app.config.get("STATS_MODE"))
    except StatsConfigError as exc:
        raise RuntimeError(str(exc)) from exc

    db.init_app(app)
    migrate.init_app(app, db)

    from stateflare.routes import bp

    app.register_blueprint(bp)

    # Ensure model metadata is registered for migrations.
    from stateflare import models  # noqa: F401

    @app.after_request
    def apply_cors_headers(response):
        # The tracking script runs on arbitrary third-party pages.
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Access-Control-Max-Age"] = "600"
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        return response

    return app
