from flask import Flask

from stockledger.configs import Config, db


def create_app(engine_url: str, overrides: dict | None = None) -> Flask:
    """Build the Flask app that owns one SQLAlchemy engine for ``engine_url``.

    Flask-SQLAlchemy creates the engine eagerly in ``init_app``, so an
    unusable URL fails here rather than on the first query.
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    app.config["SQLALCHEMY_DATABASE_URI"] = engine_url

    db.init_app(app)

    # importing registers the tables on db.metadata
    from stockledger.db import models  # noqa: F401

    return app
