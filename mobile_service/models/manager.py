# mobile_service/models/manager.py
from sqlalchemy import Column, String
from mobile_service.database import Base, generate_id


class Manager(Base):
    __tablename__ = "managers"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(200), nullable=False)

    def __repr__(self):
        return f"<Manager {self.email}>"
