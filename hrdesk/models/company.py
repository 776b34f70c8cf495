from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hrdesk.database import Base


class Company(Base):
    """Tenant root. Every employee, leave and document record is scoped to one company."""
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    domain = Column(String, unique=True, index=True, nullable=False)
    employee_count = Column(String, nullable=False)  # bracket, e.g. "11-50"
    country = Column(String, nullable=False)
    logo_url = Column(String, nullable=True)

    # permission category -> {"approver": ..., "specific_person_id": ...}
    permissions = Column(JSON, nullable=False, default=dict)

    # Last issued employee number; bumped with an UPDATE so concurrent hires never collide
    employee_sequence = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    memberships = relationship("Membership", back_populates="company", cascade="all, delete-orphan")
    employees = relationship("EmployeeProfile", back_populates="company", cascade="all, delete-orphan")
    leave_types = relationship("LeaveType", back_populates="company", cascade="all, delete-orphan")
    leave_policies = relationship("LeavePolicy", back_populates="company", cascade="all, delete-orphan")
    holidays = relationship("Holiday", back_populates="company", cascade="all, delete-orphan")
    field_options = relationship("EmployeeFieldOption", back_populates="company", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Company {self.domain}>"
