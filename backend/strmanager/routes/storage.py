from flask import Blueprint, abort, send_file

from ..errors import StorageError
from ..storage import BUCKETS, get_storage

bp = Blueprint("storage", __name__, url_prefix="/storage")


@bp.route("/<bucket>/<path:object_path>", methods=["GET"])
def serve(bucket, object_path):
    if bucket not in BUCKETS:
        abort(404)
    try:
        target = get_storage().local_path(bucket, object_path)
    except StorageError:
        abort(404)
    if not target.is_file():
        abort(404)
    return send_file(target)
