"""
EasyStock CLI.

Commands:
- easystock init-db: Create the local database tables
- easystock use-storage: Switch the active backend (local | cloud)
- easystock apply-recurring: Generate due recurring expenses
- easystock stock-report: Print stock levels, flagging low stock
"""
import asyncio
import logging

import click

from easystock import init_error_tracking
from easystock.config import Config
from easystock.database import SCHEMA_VERSION, init_db
from easystock.exceptions import StoreError
from easystock.provider import ProviderPreference, StorageType, create_store


def _run_with_store(tenant_id, preference_file, coro_fn):
    """Open the preferred store, run ``coro_fn(store)`` and close it."""
    async def main():
        storage_type = ProviderPreference(preference_file).read()
        store = await create_store(storage_type, tenant_id)
        try:
            return await coro_fn(store)
        finally:
            await store.close()

    return asyncio.run(main())


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """Inventory, sales and expense data layer tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    init_error_tracking(Config)


@cli.command('init-db')
@click.option('--database-url', default=None, help='SQLAlchemy async URL (default: DATABASE_URL)')
def init_db_command(database_url):
    """Create missing local tables and record the schema version."""
    async def main():
        engine, _ = await init_db(database_url or Config.DATABASE_URL, echo=Config.SQLALCHEMY_ECHO)
        await engine.dispose()

    asyncio.run(main())
    click.echo(click.style(f'✅ Local database ready (schema version {SCHEMA_VERSION})', fg='green'))


@cli.command('use-storage')
@click.argument('storage_type', type=click.Choice([t.value for t in StorageType]))
@click.option('--preference-file', default=None, help='Preference file (default: PREFERENCE_FILE)')
def use_storage(storage_type, preference_file):
    """Persist which backend is active."""
    ProviderPreference(preference_file).write(storage_type)
    click.echo(click.style(f'✅ Active storage: {storage_type}', fg='green'))


@cli.command('apply-recurring')
@click.option('--tenant', 'tenant_id', required=True, help='Tenant (account) id')
@click.option('--preference-file', default=None, help='Preference file (default: PREFERENCE_FILE)')
def apply_recurring(tenant_id, preference_file):
    """Generate every recurring expense that fell due up to today."""
    try:
        created = _run_with_store(tenant_id, preference_file, lambda store: store.apply_recurring_expenses())
    except StoreError as e:
        click.echo(click.style(f'❌ {e.message}', fg='red'))
        raise SystemExit(1)
    click.echo(f'{created} expense(s) generated')


@cli.command('stock-report')
@click.option('--tenant', 'tenant_id', required=True, help='Tenant (account) id')
@click.option('--preference-file', default=None, help='Preference file (default: PREFERENCE_FILE)')
def stock_report(tenant_id, preference_file):
    """Print every product with its quantity; low stock is highlighted."""
    try:
        products = _run_with_store(tenant_id, preference_file, lambda store: store.list_products())
    except StoreError as e:
        click.echo(click.style(f'❌ {e.message}', fg='red'))
        raise SystemExit(1)

    if not products:
        click.echo('No products')
        return

    for product in sorted(products, key=lambda p: p.name):
        line = f'{product.id:<16} {product.name:<30} {product.quantity:>6} (min {product.low_stock_threshold})'
        if product.is_low_stock:
            click.echo(click.style(f'{line}  LOW', fg='yellow'))
        else:
            click.echo(line)


if __name__ == '__main__':
    cli()
