from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(30), nullable=True)
    role = Column(String(30), nullable=False, default="student", index=True)
    status = Column(String(20), nullable=False, default="active", index=True)
    institute_id = Column(Integer, ForeignKey("institutes.id"), nullable=True, index=True)
    zone_id = Column(Integer, ForeignKey("zones.id"), nullable=True, index=True)
    parent_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(20), nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    institute = relationship("Institute", back_populates="users")
    zone = relationship("Zone")
    parent = relationship("User", remote_side=[id])

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def institute_name(self):
        return self.institute.name if self.institute else None

    @property
    def zone_name(self):
        return self.zone.name if self.zone else None
