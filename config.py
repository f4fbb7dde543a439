import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///swiftexpense.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "your-secret-key-change-in-production")
    JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_DAYS = int(os.environ.get("JWT_EXPIRES_DAYS", 7))

    DEFAULT_CURRENCY = os.environ.get("DEFAULT_CURRENCY", "INR")
    DEFAULT_COUNTRY = os.environ.get("DEFAULT_COUNTRY", "India")
    DEFAULT_COMPANY_SETTINGS = {
        "require_receipt_upload": True,
        "auto_approval_threshold": 5000,
        "allow_multi_currency": True,
        "require_rejection_comment": False,
    }

    EXCHANGE_API_URL = os.environ.get("EXCHANGE_API_URL", "https://api.exchangerate-api.com/v4/latest/{base}")
    COUNTRIES_API_URL = os.environ.get(
        "COUNTRIES_API_URL", "https://restcountries.com/v3.1/all?fields=name,currencies"
    )
    EXTERNAL_API_TIMEOUT = int(os.environ.get("EXTERNAL_API_TIMEOUT", 10))
    EXTERNAL_API_CACHE_SECONDS = int(os.environ.get("EXTERNAL_API_CACHE_SECONDS", 3600))

    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", os.path.join(os.getcwd(), "uploads", "receipts"))
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024
    ALLOWED_RECEIPT_MIMETYPES = {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/pdf",
    }

    EXPENSES_PER_PAGE = 20
    ACTIVITY_LOGS_PER_PAGE = 50
    NOTIFICATIONS_PER_PAGE = 20
    MAX_PER_PAGE = 100
    MAX_NOTIFICATIONS_PER_PAGE = 50

    MAIL_SERVER = os.environ.get("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.environ.get("MAIL_PORT", 587))
    MAIL_USE_TLS = os.environ.get("MAIL_USE_TLS", "true").lower() in {"1", "true", "yes"}
    MAIL_USERNAME = os.environ.get("MAIL_USERNAME")
    MAIL_PASSWORD = os.environ.get("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.environ.get("MAIL_DEFAULT_SENDER", "noreply@swiftexpense.local")
    NOTIFICATION_EMAILS_ENABLED = os.environ.get("NOTIFICATION_EMAILS_ENABLED", "false").lower() in {
        "1",
        "true",
        "yes",
    }


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "testing-secret"
    MAIL_SUPPRESS_SEND = True
    EXTERNAL_API_TIMEOUT = 1


class ProductionConfig(Config):
    DEBUG = False


config_by_name = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
