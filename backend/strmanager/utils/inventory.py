import logging

from ..extensions import db
from ..models import InventoryItem, InventoryUpdate

logger = logging.getLogger(__name__)

OUT_OF_STOCK = "Out of Stock"
LOW_STOCK = "Low Stock"
IN_STOCK = "In Stock"

# fields carried over when a master item is copied to a property
COPY_FIELDS = (
    "name", "category_id", "reorder_quantity", "unit_price", "unit",
    "units_per_package", "cost_per_package", "supplier", "description", "notes",
    "amazon_image_url", "amazon_title", "amazon_link", "asin", "reorder_link",
    "image_url", "barcode",
)


def stock_status(current_quantity, restock_threshold) -> str:
    qty = current_quantity or 0
    if qty == 0:
        return OUT_OF_STOCK
    if qty <= (restock_threshold or 0):
        return LOW_STOCK
    return IN_STOCK


def needs_restock(item) -> bool:
    return (item.current_quantity or 0) <= (item.restock_threshold or 0)


def set_quantity(item, new_quantity, user_id, change_type="manual_count", notes=None):
    """Set the on-hand count and append a row to the change log."""
    new_quantity = max(0, int(new_quantity))
    previous = item.current_quantity or 0

    item.current_quantity = new_quantity
    log = InventoryUpdate(
        item_id=item.id,
        previous_quantity=previous,
        new_quantity=new_quantity,
        change_type=change_type,
        notes=notes,
        updated_by=user_id,
    )
    db.session.add(log)
    db.session.commit()
    logger.info("stock item=%s %s -> %s (%s)", item.id, previous, new_quantity, change_type)
    return log


def copy_masters_to_property(masters, property_id, user_id, thresholds=None):
    """
    Create independent per-property rows from master items.

    New rows start at zero on hand with no restock request. Masters whose name
    already exists on the property (case-insensitive) are skipped.
    """
    thresholds = thresholds or {}
    existing = {
        name.lower()
        for (name,) in db.session.query(InventoryItem.name)
        .filter(InventoryItem.property_id == property_id)
        .all()
    }

    created, skipped = [], []
    for master in masters:
        if master.name.lower() in existing:
            skipped.append(master.id)
            continue

        row = InventoryItem(**{f: getattr(master, f) for f in COPY_FIELDS})
        row.property_id = property_id
        row.current_quantity = 0
        row.restock_threshold = thresholds.get(master.id, master.restock_threshold)
        row.restock_requested = False
        row.created_by = user_id

        db.session.add(row)
        existing.add(master.name.lower())
        created.append(row)

    db.session.commit()
    return created, skipped
