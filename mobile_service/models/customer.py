# mobile_service/models/customer.py
"""
Customer registry, keyed by email.
Upserted on every booking by customer_service.upsert_customer.
"""

from sqlalchemy import Column, String, Text, DateTime
from mobile_service.database import Base, generate_id


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=False)
    preferred_contact_method = Column(String(50))   # phone-text | phone-call | email
    address = Column(Text)
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<Customer {self.email}>"
