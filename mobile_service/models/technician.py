# mobile_service/models/technician.py
"""
Technicians (mechanics) table.
Created and edited by managers. Technicians with an email + password hash can
log in to the technician portal; is_public controls the landing-page listing.
"""

from sqlalchemy import Column, Integer, String, Text, Boolean
from mobile_service.database import Base, generate_id


class Technician(Base):
    __tablename__ = "mechanics"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, index=True)
    password_hash = Column(String(255))
    name = Column(String(200), nullable=False)
    phone = Column(String(50))
    photo_url = Column(String(500))
    bio = Column(Text)
    oil_change_count = Column(Integer, default=0, nullable=False)
    background_check_verified = Column(Boolean, default=False, nullable=False)
    is_public = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Technician {self.id} name={self.name}>"
