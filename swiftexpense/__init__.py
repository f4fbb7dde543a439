"""Application factory and extension initialization for SwiftExpense."""
from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from flask_login import LoginManager
from flask_mail import Mail
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from config import config_by_name

# Global extension instances -------------------------------------------------

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
mail = Mail()


def configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        root.addHandler(handler)
    root.setLevel(level)
    app.logger.setLevel(level)


def create_app(config_name: Optional[str] = None) -> Flask:
    """Flask application factory."""
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)

    config_name = config_name or os.getenv("FLASK_CONFIG", "development")
    config_class = config_by_name.get(config_name.lower())
    if config_class is None:
        raise ValueError(f"Unknown Flask configuration '{config_name}'")

    app.config.from_object(config_class)
    configure_logging(app)

    # Ensure instance folder exists for SQLite DBs or uploads
    os.makedirs(app.instance_path, exist_ok=True)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    mail.init_app(app)

    from swiftexpense.services.email_service import init_email_service
    init_email_service(mail)

    from swiftexpense import auth_loader, errors
    auth_loader.init_login_manager(login_manager)
    errors.register_error_handlers(app)

    from swiftexpense.services import notification_service
    app.after_request(notification_service.flush_outbox)

    # Register blueprints
    from swiftexpense.main import main_bp
    from swiftexpense.auth import auth_bp
    from swiftexpense.users import users_bp
    from swiftexpense.companies import companies_bp
    from swiftexpense.expenses import expenses_bp
    from swiftexpense.approvals import approvals_bp
    from swiftexpense.workflows import workflows_bp
    from swiftexpense.analytics import analytics_bp
    from swiftexpense.notifications import notifications_bp
    from swiftexpense.activity_logs import activity_logs_bp
    from swiftexpense.uploads import uploads_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(companies_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(approvals_bp)
    app.register_blueprint(workflows_bp)
    app.register_blueprint(analytics_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(activity_logs_bp)
    app.register_blueprint(uploads_bp)

    # Import all models to ensure they are registered with SQLAlchemy
    from swiftexpense.models import (  # noqa: F401
        ActivityLog, ApprovalStep, ApprovalWorkflow, Company, Expense, Notification, User
    )

    @app.shell_context_processor
    def shell_context():
        return {"db": db, "User": User, "Expense": Expense, "Company": Company}

    return app
