from datetime import datetime
from models.db import db

class CustomerNote(db.Model):
    __tablename__ = "customer_notes"

    id = db.Column(db.Integer, primary_key=True)

    # str(user id) for registered customers, "guest-<email>" for guests
    customer_id = db.Column(db.String(320), nullable=False, index=True)
    note_text = db.Column(db.Text, nullable=False)
    created_by = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
