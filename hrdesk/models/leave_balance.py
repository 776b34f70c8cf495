from sqlalchemy import Column, Integer, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from hrdesk.database import Base


class LeaveBalance(Base):
    """Remaining hours for one employee / leave type pair. Zeroed, never deleted."""
    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint("employee_profile_id", "leave_type_id", name="uq_leave_balance_employee_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_profile_id = Column(Integer, ForeignKey("employee_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type_id = Column(Integer, ForeignKey("leave_types.id", ondelete="CASCADE"), nullable=False, index=True)
    remaining_hours = Column(Float, nullable=False, default=0.0)

    employee = relationship("EmployeeProfile", back_populates="leave_balances")
    leave_type = relationship("LeaveType")
