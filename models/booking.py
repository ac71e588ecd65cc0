from datetime import datetime
from models.db import db

BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled")

class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)
    ticket_number = db.Column(db.String(32), nullable=False, unique=True, index=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    service_id = db.Column(db.Integer, db.ForeignKey("services.id"), nullable=True, index=True)
    original_booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id"), nullable=True)

    status = db.Column(db.String(20), nullable=False, default="confirmed")
    # status values: pending, confirmed, completed, cancelled

    appointment_date = db.Column(db.Date, nullable=False)
    appointment_time = db.Column(db.String(5), nullable=False)
    slot_duration = db.Column(db.Integer, nullable=False, default=40)

    # 1..capacity while confirmed, NULL once released
    slot_seat = db.Column(db.Integer, nullable=True)

    customer_name = db.Column(db.String(255), nullable=False)
    customer_email = db.Column(db.String(255), nullable=False)
    customer_phone = db.Column(db.String(20), nullable=False, index=True)
    booking_for_name = db.Column(db.String(255), nullable=True)

    special_request = db.Column(db.Text, nullable=True)
    inspiration_photos = db.Column(db.JSON, nullable=True)
    admin_notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    confirmed_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)
    cancellation_reason = db.Column(db.String(255), nullable=True)
    cancelled_by = db.Column(db.String(20), nullable=True)  # customer, admin

    user = db.relationship("User", back_populates="bookings")
    service = db.relationship("Service")
    original_booking = db.relationship("Booking", remote_side=[id])

    __table_args__ = (
        # Hard business rule: a seat in a slot is held by at most one confirmed booking.
        # Seats only go up to the slot capacity, so this bounds admissions per slot.
        db.UniqueConstraint("appointment_date", "appointment_time", "slot_seat", name="uq_booking_slot_seat"),
        db.Index("ix_booking_slot_status", "appointment_date", "appointment_time", "status"),
    )
