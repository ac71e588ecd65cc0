from datetime import datetime
from models.db import db

class CapacityOverride(db.Model):
    __tablename__ = "capacity_overrides"

    id = db.Column(db.Integer, primary_key=True)

    override_date = db.Column(db.Date, nullable=False, index=True)
    time_slot = db.Column(db.String(5), nullable=False)
    capacity = db.Column(db.Integer, nullable=False)  # 0 blocks the slot

    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("capacity >= 0", name="ck_override_capacity_non_negative"),
        db.Index("ix_override_date_slot", "override_date", "time_slot"),
    )
