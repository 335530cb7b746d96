import math
from urllib.parse import urlencode
from flask import request

MAX_PER_PAGE = 100
DEFAULT_PER_PAGE = 25


def _page_params():
    page = request.args.get("page", type=int) or 1
    per_page = request.args.get("per_page", type=int) or DEFAULT_PER_PAGE
    return max(page, 1), min(max(per_page, 1), MAX_PER_PAGE)


def _link(page, per_page):
    args = request.args.to_dict()
    args["page"] = page
    args["per_page"] = per_page
    return f"{request.base_url}?{urlencode(args)}"


def paginate(query, serialize):
    """Slice a query by ?page/?per_page and return the list payload."""
    page, per_page = _page_params()

    total_items = query.order_by(None).count()
    total_pages = max(1, math.ceil(total_items / per_page))
    page = min(page, total_pages)

    rows = query.limit(per_page).offset((page - 1) * per_page).all()

    links = {"self": _link(page, per_page)}
    if page > 1:
        links["prev"] = _link(page - 1, per_page)
    if page < total_pages:
        links["next"] = _link(page + 1, per_page)

    return {
        "items": [serialize(r) for r in rows],
        "meta": {
            "page": page,
            "per_page": per_page,
            "total_items": total_items,
            "total_pages": total_pages,
        },
        "links": links,
    }
