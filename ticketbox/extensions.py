from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager

db = SQLAlchemy()
jwt = JWTManager()

# Revoked token ids; process-local, cleared on restart
BLOCKLIST = set()


def dispose_engine(app):
    """Drain the connection pool. Called once on shutdown."""
    with app.app_context():
        db.engine.dispose()
