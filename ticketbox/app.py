"""
Ticketbox — Flask application
Event catalog, ticket sales and order history.
"""

import logging
import os
from datetime import datetime, timedelta, timezone

import click
from dotenv import load_dotenv
from flasgger import Swagger
from flask import Flask, jsonify

from ticketbox.extensions import BLOCKLIST, db, dispose_engine, jwt

load_dotenv()

SWAGGER_TEMPLATE = {
    "info": {"title": "Ticketbox API", "version": "0.1.0"},
    "securityDefinitions": {
        "Bearer": {"type": "apiKey", "name": "Authorization", "in": "header"},
    },
}


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _database_uri():
    url = os.environ.get('DATABASE_URL')
    if url:
        # Hosted Postgres providers still hand out the legacy scheme
        if url.startswith('postgres://'):
            url = 'postgresql://' + url[len('postgres://'):]
        return url

    db_user = os.environ.get('DB_USER', 'ticketbox')
    db_pass = os.environ.get('DB_PASS', 'password')
    db_host = os.environ.get('DB_HOST', 'localhost')
    db_name = os.environ.get('DB_NAME', 'ticketbox')
    return f"postgresql://{db_user}:{db_pass}@{db_host}/{db_name}"


def _engine_options(uri):
    # SQLite engines use single-connection pools that reject these options
    if uri.startswith('sqlite'):
        return {}
    return {
        'pool_size': int(os.environ.get('DB_POOL_SIZE', 5)),
        'max_overflow': 0,
        'pool_timeout': float(os.environ.get('DB_POOL_TIMEOUT', 2)),
        'pool_recycle': int(os.environ.get('DB_POOL_RECYCLE', 300)),
        'pool_pre_ping': True,
    }


def configure_logging():
    level = os.environ.get('LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def create_app(test_config=None):
    configure_logging()
    app = Flask(__name__)

    # Configuration
    uri = _database_uri()
    app.config['SQLALCHEMY_DATABASE_URI'] = uri
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = _engine_options(uri)
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['JWT_SECRET_KEY'] = os.environ.get('JWT_SECRET', 'dev-secret-change-me')
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(minutes=int(os.environ.get('JWT_ACCESS_MINUTES', 60)))
    app.config['JWT_REFRESH_TOKEN_EXPIRES'] = timedelta(days=7)
    app.config['MAX_TICKETS_PER_USER'] = int(os.environ.get('MAX_TICKETS_PER_USER', 2))
    app.config['PURCHASE_LOCK_TIMEOUT_MS'] = int(os.environ.get('PURCHASE_LOCK_TIMEOUT_MS', 5000))
    app.config['PURCHASE_SERIALIZE_PER_USER'] = _env_bool('PURCHASE_SERIALIZE_PER_USER', True)

    if test_config:
        app.config.update(test_config)

    # Initialize Extensions
    db.init_app(app)
    jwt.init_app(app)

    @jwt.token_in_blocklist_loader
    def check_if_token_in_blocklist(jwt_header, jwt_payload):
        return jwt_payload['jti'] in BLOCKLIST

    # Malformed tokens and wrong token types are auth failures, not 422s
    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'msg': reason}), 401

    Swagger(app, template=SWAGGER_TEMPLATE)

    # Register Blueprints
    from ticketbox.routes.auth import auth_bp
    app.register_blueprint(auth_bp, url_prefix='/api/auth')

    from ticketbox.routes.categories import category_bp
    app.register_blueprint(category_bp, url_prefix='/api/categories')

    from ticketbox.routes.events import event_bp
    app.register_blueprint(event_bp, url_prefix='/api/events')

    from ticketbox.routes.tickets import ticket_bp
    app.register_blueprint(ticket_bp, url_prefix='/api/tickets')

    from ticketbox.routes.orders import order_bp
    app.register_blueprint(order_bp, url_prefix='/api/orders')

    @app.route('/')
    def index():
        return jsonify({'service': 'ticketbox', 'msg': 'Welcome to the Ticketbox API'})

    @app.route('/health')
    def health():
        try:
            db.session.execute(db.text('SELECT 1'))
            return {
                "service": "ticketbox",
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }, 200
        except Exception as e:
            db.session.rollback()
            return {"service": "ticketbox", "status": "unhealthy", "error": str(e)}, 503

    register_error_handlers(app)
    register_commands(app)
    return app


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(_):
        return jsonify({'msg': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(_):
        return jsonify({'msg': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def server_error(_):
        return jsonify({'msg': 'Server error'}), 500


def register_commands(app):
    @app.cli.command('init-db')
    def init_db():
        """Create all tables."""
        db.create_all()
        click.echo('Database tables created.')

    @app.cli.command('promote-admin')
    @click.argument('email')
    def promote_admin(email):
        """Give an existing user the admin role."""
        from ticketbox.models import User

        user = User.query.filter_by(email=email).first()
        if not user:
            raise click.ClickException(f'No user with email {email}')
        user.role = 'admin'
        db.session.commit()
        click.echo(f'{email} is now an admin.')


if __name__ == '__main__':
    app = create_app()
    try:
        app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
    finally:
        dispose_engine(app)
