"""Tenant settings stored as single keyed values (rate table, app settings)."""
from typing import List

from easystock.entities import AppSettings, Currency, ExchangeRate
from easystock.services.currency_service import default_exchange_rates
from easystock.utils.numbers import to_decimal

EXCHANGE_RATES_KEY = 'exchange_rates'
APP_SETTINGS_KEY = 'app_settings'


async def read_exchange_rates(unit) -> List[ExchangeRate]:
    """Rate table of the tenant, or the default table if none was saved."""
    value = await unit.get_setting(EXCHANGE_RATES_KEY)
    if value is None:
        return default_exchange_rates()
    return [
        ExchangeRate(currency=Currency(item['currency']), rate=to_decimal(item['rate']))
        for item in value
    ]


async def write_exchange_rates(unit, rates: List[ExchangeRate]) -> None:
    value = [
        {'currency': Currency(rate.currency).value, 'rate': str(to_decimal(rate.rate))}
        for rate in rates
    ]
    await unit.put_setting(EXCHANGE_RATES_KEY, value)


def app_settings_from_value(value, default_shop_name: str) -> AppSettings:
    if not value:
        return AppSettings(shop_name=default_shop_name)
    return AppSettings(shop_name=value.get('shop_name') or default_shop_name)


async def read_app_settings(unit, default_shop_name: str) -> AppSettings:
    return app_settings_from_value(await unit.get_setting(APP_SETTINGS_KEY), default_shop_name)


async def write_app_settings(unit, settings: AppSettings) -> None:
    await unit.put_setting(APP_SETTINGS_KEY, {'shop_name': settings.shop_name})
