"""Mock backend for the booking portal.

Flask server standing in for the account and booking services:
- Free slots per lawyer and date
- Booking creation, lookup, update and cancellation
- Lawyer and customer booking listings
- Shift catalog, day-off listing and justification

Run with: python mock_api.py
"""
import uuid
from datetime import datetime

from flask import Flask, jsonify, request
from flask_cors import CORS

from booking_rules import config
from booking_rules.logging_config import RequestIDMiddleware, setup_structured_logging
from booking_rules.models import Slot
from booking_rules.slots import is_consecutive, sort_slots
from booking_rules.timeutils import parse_calendar_day

app = Flask(__name__)
CORS(app)
app.wsgi_app = RequestIDMiddleware(app.wsgi_app)

# In-memory storage
bookings = []
day_offs = []


def reset_state():
    """Drop all bookings and day-off requests."""
    bookings.clear()
    day_offs.clear()


def slot_id_for(lawyer_id, date_str, start_time):
    return f"{lawyer_id}-{date_str}-{start_time[:5].replace(':', '')}"


def day_slots(lawyer_id, date_str):
    """The lawyer's working-day slots for a date, booked or not."""
    return [
        {
            "slotId": slot_id_for(lawyer_id, date_str, template["slotStartTime"]),
            "slotStartTime": template["slotStartTime"],
            "slotEndTime": template["slotEndTime"],
            "bookingSlots": [],
        }
        for template in config.WORKING_DAY_SLOTS
    ]


def taken_slot_ids(lawyer_id, date_str, exclude_booking=None):
    """Slot ids held by the lawyer's active bookings on a date."""
    taken = set()
    for booking in bookings:
        if booking["bookingId"] == exclude_booking:
            continue
        if (
            booking["lawyerId"] == lawyer_id
            and booking["bookingDate"] == date_str
            and booking["status"] in config.ACTIVE_BOOKING_STATUSES
        ):
            taken.update(booking["slotId"])
    return taken


def find_booking(booking_id):
    return next((b for b in bookings if b["bookingId"] == booking_id), None)


def resolve_booking_slots(data, exclude_booking=None):
    """
    Validate a booking body's date and slots.

    Returns:
        Tuple of (sorted slot dicts, None) or (None, (error, status_code))
    """
    date_str = data.get("bookingDate")
    lawyer_id = data.get("lawyerId")
    slot_ids = data.get("slotId") or []

    if not lawyer_id or parse_calendar_day(date_str) is None:
        return None, ("Missing or invalid fields: lawyerId, bookingDate", 400)
    if not slot_ids:
        return None, ("At least one slot is required", 400)

    catalog = [Slot.model_validate(s) for s in day_slots(lawyer_id, date_str)]
    known = {slot.slot_id for slot in catalog}
    if any(slot_id not in known for slot_id in slot_ids):
        return None, ("Unknown slot id", 400)
    if not is_consecutive(catalog, slot_ids):
        return None, ("Slots must be consecutive", 400)
    if set(slot_ids) & taken_slot_ids(lawyer_id, date_str, exclude_booking):
        return None, ("Slot already booked", 409)

    chosen = sort_slots(slot for slot in catalog if slot.slot_id in set(slot_ids))
    return chosen, None


@app.route('/api/Slot/free-slot', methods=['GET'])
def get_free_slots():
    """GET /api/Slot/free-slot?lawyerId=...&date=YYYY-MM-DD"""
    lawyer_id = request.args.get("lawyerId")
    date_str = request.args.get("date")
    if not lawyer_id or parse_calendar_day(date_str) is None:
        return jsonify({"message": "lawyerId and a valid date are required"}), 400

    taken = taken_slot_ids(lawyer_id, date_str)
    return jsonify([s for s in day_slots(lawyer_id, date_str) if s["slotId"] not in taken])


@app.route('/api/Booking', methods=['POST'])
def create_booking():
    """POST /api/Booking - Create a Pending booking from consecutive slots."""
    data = request.get_json(silent=True) or {}
    chosen, error = resolve_booking_slots(data)
    if error:
        message, status = error
        return jsonify({"message": message}), status

    booking = {
        "bookingId": f"BK-{uuid.uuid4().hex[:8]}",
        "bookingDate": data["bookingDate"],
        "price": data.get("price", 0),
        "description": data.get("description", ""),
        "customerId": data.get("customerId"),
        "lawyerId": data["lawyerId"],
        "serviceId": data.get("serviceId"),
        "startTime": chosen[0].start_time,
        "endTime": chosen[-1].end_time,
        "status": "Pending",
        "slotId": [slot.slot_id for slot in chosen],
        "createdAt": datetime.now().isoformat(),
    }
    bookings.append(booking)
    return jsonify({"bookingId": booking["bookingId"]}), 201


@app.route('/api/Booking', methods=['GET'])
def list_customer_bookings():
    """GET /api/Booking?customerId=...&status=..."""
    customer_id = request.args.get("customerId")
    status = request.args.get("status")
    return jsonify([
        b for b in bookings
        if b["customerId"] == customer_id and (status is None or b["status"] == status)
    ])


@app.route('/api/Booking/lawyer-all/<lawyer_id>', methods=['GET'])
def list_lawyer_bookings(lawyer_id):
    """GET /api/Booking/lawyer-all/<lawyerId>?status=... (204 when empty)"""
    status = request.args.get("status")
    found = [
        b for b in bookings
        if b["lawyerId"] == lawyer_id and (status is None or b["status"] == status)
    ]
    if not found:
        return "", 204
    return jsonify(found)


@app.route('/api/Booking/<booking_id>', methods=['GET'])
def get_booking(booking_id):
    booking = find_booking(booking_id)
    if not booking:
        return jsonify({"message": f"Booking '{booking_id}' not found"}), 404
    return jsonify(booking)


@app.route('/api/Booking/<booking_id>', methods=['PUT'])
def update_booking(booking_id):
    """PUT /api/Booking/<id> - Move a booking to new consecutive slots."""
    booking = find_booking(booking_id)
    if not booking:
        return jsonify({"message": f"Booking '{booking_id}' not found"}), 404
    if booking["status"] not in config.ACTIVE_BOOKING_STATUSES:
        return jsonify({"message": f"Cannot update a {booking['status']} booking"}), 400

    data = request.get_json(silent=True) or {}
    chosen, error = resolve_booking_slots(data, exclude_booking=booking_id)
    if error:
        message, status = error
        return jsonify({"message": message}), status

    if booking["status"] == "Paid" and len(chosen) != len(booking["slotId"]):
        return jsonify({"message": "Paid bookings must keep their slot count"}), 400

    booking.update({
        "bookingDate": data["bookingDate"],
        "lawyerId": data["lawyerId"],
        "serviceId": data.get("serviceId", booking["serviceId"]),
        "description": data.get("description", booking["description"]),
        "price": data.get("price", booking["price"]),
        "startTime": chosen[0].start_time,
        "endTime": chosen[-1].end_time,
        "slotId": [slot.slot_id for slot in chosen],
    })
    return jsonify(booking)


@app.route('/api/Booking/<booking_id>', methods=['DELETE'])
def cancel_booking(booking_id):
    """DELETE /api/Booking/<id> - Cancel (status change, record is kept)."""
    booking = find_booking(booking_id)
    if not booking:
        return jsonify({"message": f"Booking '{booking_id}' not found"}), 404
    if booking["status"] == "Cancelled":
        return jsonify({"message": f"Booking {booking_id} is already cancelled"}), 400

    booking["status"] = "Cancelled"
    booking["cancelledAt"] = datetime.now().isoformat()
    return jsonify({"message": f"Booking {booking_id} has been cancelled"})


@app.route('/api/shifts', methods=['GET'])
def get_shifts():
    return jsonify(config.DEFAULT_SHIFTS)


@app.route('/api/day-off', methods=['GET'])
def list_day_offs():
    """GET /api/day-off?fromDate=...&toDate=...

    Requests still awaiting a decision are listed even when their date is
    before fromDate, so lapsed ones can be cleaned up.
    """
    from_day = parse_calendar_day(request.args.get("fromDate"))
    to_day = parse_calendar_day(request.args.get("toDate"))
    if from_day is None or to_day is None:
        return jsonify({"message": "fromDate and toDate are required"}), 400

    listed = []
    for day_off in day_offs:
        day = parse_calendar_day(day_off["dayOff"])
        waiting = any(s["status"] == "WAITING" for s in day_off["specificDayOffs"])
        if day is not None and (from_day <= day <= to_day or (day < from_day and waiting)):
            listed.append(day_off)
    return jsonify(listed)


@app.route('/api/day-off/justify/<day_off_id>', methods=['PUT'])
def justify_day_off(day_off_id):
    """PUT /api/day-off/justify/<id> - body: [{"shiftId": ..., "status": ...}]"""
    day_off = next((d for d in day_offs if d["dayOffId"] == day_off_id), None)
    if not day_off:
        return jsonify({"message": f"Day off '{day_off_id}' not found"}), 404

    items = request.get_json(silent=True)
    if not isinstance(items, list):
        return jsonify({"message": "Expected a list of justifications"}), 400

    decisions = {item.get("shiftId"): item.get("status") for item in items}
    if any(status not in ("WAITING", "APPROVED", "REJECTED") for status in decisions.values()):
        return jsonify({"message": "Invalid shift status"}), 400

    for shift in day_off["specificDayOffs"]:
        if shift["shiftId"] in decisions:
            shift["status"] = decisions[shift["shiftId"]]
    return jsonify(day_off)


@app.route('/health', methods=['GET'])
def health_check():
    """GET /health - Health check endpoint."""
    return jsonify({
        "status": "healthy",
        "total_bookings": len(bookings),
        "total_day_offs": len(day_offs),
        "timestamp": datetime.now().isoformat()
    })


if __name__ == "__main__":
    setup_structured_logging(config.LOG_LEVEL)
    print(f"Mock portal API on http://localhost:{config.MOCK_API_PORT}")
    app.run(debug=True, port=config.MOCK_API_PORT)
