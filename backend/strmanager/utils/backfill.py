"""
One-off repair for rows created before properties existed.

Points every inspection record, inventory item and damage report that has
no property at the default property, and gives template-less inspection
records the first template. Safe to run more than once: a second run finds
nothing to update.
"""
import logging

from ..store import store

logger = logging.getLogger(__name__)

BACKFILL_PROPERTY_ID = "79280fbd-5476-47f5-bcc0-1fada823d922"

TABLES = ("inspection_records", "inventory_items", "damage_reports")


def backfill_unassigned(property_id=BACKFILL_PROPERTY_ID):
    store.get("properties", property_id)

    counts = {}
    for table in TABLES:
        counts[table] = store.update_where(table, {"property_id": None}, {"property_id": property_id})

    counts["inspection_templates_linked"] = 0
    templates = store.list("inspection_templates", order_by="created_at")
    if templates:
        counts["inspection_templates_linked"] = store.update_where(
            "inspection_records", {"template_id": None}, {"template_id": templates[0]["id"]}
        )

    logger.info("backfill into property %s: %s", property_id, counts)
    return counts
