from flask import Blueprint, jsonify, request

from scheduling.catalog import list_services
from utils.serializers import service_json

catalog_bp = Blueprint("catalog", __name__)

@catalog_bp.get("/services")
def public_services():
    sort_by = request.args.get("sort_by", "display_order")
    services = list_services(active_only=True, sort_by=sort_by)
    return jsonify(services=[service_json(s) for s in services]), 200
