from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class Profile(Base):
    """Admin role. Every profile grants full back-office access."""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)

    # Relationships
    employees = relationship("Employee", back_populates="profile")


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    firstname = Column(String(100), nullable=False)
    lastname = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    passwd = Column(String(255), nullable=False)  # bcrypt hash
    active = Column(Boolean, nullable=False, default=True)
    profile_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    last_connection_date = Column(DateTime(timezone=True))
    date_add = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    profile = relationship("Profile", back_populates="employees")

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()
