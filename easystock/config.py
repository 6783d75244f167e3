"""Configuration module for the EasyStock data layer."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Local store (embedded SQLite through SQLAlchemy asyncio)
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite+aiosqlite:///easystock.sqlite3')
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', '0') == '1'

    # Remote store (Redis document store, one key namespace per tenant)
    REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
    STORE_KEY_PREFIX = os.getenv('STORE_KEY_PREFIX', 'easystock')
    REDIS_SOCKET_TIMEOUT = int(os.getenv('REDIS_SOCKET_TIMEOUT', '5'))  # seconds
    REDIS_MAX_CONNECTIONS = int(os.getenv('REDIS_MAX_CONNECTIONS', '20'))

    # Provider selector
    PREFERENCE_FILE = os.getenv(
        'PREFERENCE_FILE',
        os.path.join(os.path.expanduser('~'), '.easystock', 'preferences.json')
    )

    # Business defaults
    DEFAULT_SHOP_NAME = os.getenv('DEFAULT_SHOP_NAME', 'EasyStock')
    SALARY_EXPENSE_TITLE = os.getenv('SALARY_EXPENSE_TITLE', 'Salary {name}')

    # Inventory recommendations collaborator
    RECOMMENDATIONS_URL = os.getenv('RECOMMENDATIONS_URL')
    RECOMMENDATIONS_TOKEN = os.getenv('RECOMMENDATIONS_TOKEN')
    RECOMMENDATIONS_TIMEOUT = int(os.getenv('RECOMMENDATIONS_TIMEOUT', '30'))

    # Object storage for uploaded receipts (optional, remote store only)
    # Compatible with AWS S3, DigitalOcean Spaces, MinIO
    S3_ENDPOINT = os.getenv('S3_ENDPOINT')
    S3_ACCESS_KEY = os.getenv('S3_ACCESS_KEY')
    S3_SECRET_KEY = os.getenv('S3_SECRET_KEY')
    S3_BUCKET = os.getenv('S3_BUCKET')
    S3_REGION = os.getenv('S3_REGION', 'us-east-1')
    S3_PUBLIC_URL = os.getenv('S3_PUBLIC_URL', 'http://localhost:9000')

    # Error tracking
    SENTRY_DSN = os.getenv('SENTRY_DSN')
    ENV = os.getenv('EASYSTOCK_ENV', 'development')
