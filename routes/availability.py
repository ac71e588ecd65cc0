from flask import Blueprint, jsonify, request

from scheduling.capacity import day_availability, range_availability, slot_availability
from scheduling.errors import validation_error
from scheduling.policy import current_policy
from utils.validators import parse_date, parse_time

availability_bp = Blueprint("availability", __name__, url_prefix="/availability")


@availability_bp.get("")
def availability_range():
    start_date = request.args.get("start_date")
    end_date = request.args.get("end_date")
    if not start_date or not end_date:
        raise validation_error("start_date and end_date are required")

    policy = current_policy()
    dates = range_availability(
        parse_date(start_date, "start_date"),
        parse_date(end_date, "end_date"),
        policy,
    )
    return jsonify(dates=dates), 200


@availability_bp.get("/<date_str>")
def availability_for_day(date_str: str):
    return jsonify(day_availability(parse_date(date_str), current_policy())), 200


@availability_bp.get("/<date_str>/<time_str>")
def availability_for_slot(date_str: str, time_str: str):
    policy = current_policy()
    day = parse_date(date_str)
    slot = parse_time(time_str, policy.time_slots)
    return jsonify(slot_availability(day, slot, policy)), 200
