"""
Sale completion - backend agnostic.

Runs inside the single atomic unit opened by the store, so the stock
decrements, the cost snapshots, the optional new customer and the sale
record are committed together or not at all.
"""
import logging
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Optional

from easystock.entities import Customer, Product, Sale, new_id, next_sale_id
from easystock.exceptions import BusinessLogicError
from easystock.services.currency_service import normalize_costs
from easystock.services.settings_service import read_exchange_rates

logger = logging.getLogger(__name__)


async def complete_sale(unit, draft: Sale, new_customer_name: Optional[str] = None) -> Sale:
    """
    Finalize a cart into a persisted sale.

    Steps:
    1. Assign a fresh time-ordered sale id
    2. Create the customer typed into the cart when no existing one was picked
    3. Load the exchange rates once
    4. Per line: snapshot quantity x normalized unit cost and decrement stock
       (read-modify-write on the product; a deleted product gets a zero
       snapshot and no stock change)
    5. Persist the touched products and the sale

    Stock is allowed to go negative (oversell is recorded, not rejected).

    Args:
        unit: Open unit of work of the active store
        draft: Sale without id and without cost snapshots
        new_customer_name: Free-text customer name from the cart search box

    Returns:
        The persisted Sale

    Raises:
        BusinessLogicError: empty cart or non-positive line quantity
    """
    if not draft.items:
        raise BusinessLogicError('The cart is empty')

    for item in draft.items:
        if item.quantity <= 0:
            raise BusinessLogicError(f'Quantity for "{item.product_name}" must be greater than 0')

    # Step 1
    sale = replace(draft, id=next_sale_id(), items=[], payment_ids=list(draft.payment_ids or []))

    # Step 2
    name = (new_customer_name or '').strip()
    if name and not draft.customer_id:
        customer = Customer(id=new_id(), name=name, phone='', address='')
        await unit.add(customer)
        sale.customer_id = customer.id
        sale.customer_name = customer.name
        logger.info(f"[SALES] New customer '{name}' created with sale {sale.id}")

    # Step 3
    rates = await read_exchange_rates(unit)

    # Step 4
    touched: Dict[str, Product] = {}
    for item in draft.items:
        product = touched.get(item.product_id)
        if product is None:
            product = await unit.get(Product, item.product_id)

        if product is None:
            logger.warning(
                f"[SALES] Product '{item.product_id}' no longer exists; sale {sale.id} records zero cost"
            )
            sale.items.append(replace(item, total_cost=Decimal('0')))
            continue

        unit_cost = normalize_costs(product.costs, rates)
        sale.items.append(replace(item, total_cost=unit_cost * item.quantity))
        product.quantity -= item.quantity
        touched[product.id] = product

        if product.quantity < 0:
            logger.warning(f"[SALES] Product '{product.id}' oversold, quantity now {product.quantity}")

    # Step 5
    for product in touched.values():
        await unit.put(product)
    await unit.add(sale)

    logger.info(f"[SALES] ✓ Sale {sale.id} completed ({len(sale.items)} lines, total {sale.total})")
    return sale
