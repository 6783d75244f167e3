"""EasyStock data layer: pluggable local/remote persistence for inventory, sales and expenses."""
import logging

from easystock.config import Config
from easystock.provider import ProviderPreference, StorageType, create_store, resolve_privilege

__version__ = '0.1.0'

logger = logging.getLogger(__name__)


def init_error_tracking(config=Config) -> bool:
    """Initialize Sentry when a DSN is configured; returns whether it was enabled."""
    if not config.SENTRY_DSN:
        return False

    import sentry_sdk
    from sentry_sdk.integrations.redis import RedisIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=config.SENTRY_DSN,
        integrations=[SqlalchemyIntegration(), RedisIntegration()],
        traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
        environment=config.ENV,
        release=__version__,
    )
    logger.info(f"[SENTRY] ✓ Error tracking enabled ({config.ENV})")
    return True


__all__ = [
    'Config', 'ProviderPreference', 'StorageType', 'create_store',
    'resolve_privilege', 'init_error_tracking',
]
