from sqlalchemy import Column, Integer, String, Date, Float, ForeignKey, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hrdesk.database import Base
import enum


class TimeOffStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    DENIED = "Denied"


class TimeOffRequest(Base):
    __tablename__ = "time_off_requests"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = Column(Integer, primary_key=True, index=True)
    employee_profile_id = Column(Integer, ForeignKey("employee_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    # Null for public holidays
    leave_type_id = Column(Integer, ForeignKey("leave_types.id", ondelete="SET NULL"), nullable=True, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    note = Column(Text, nullable=True)
    status = Column(String, default=TimeOffStatus.PENDING.value, nullable=False, index=True)

    requested_at = Column(DateTime(timezone=True), server_default=func.now())
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by_id = Column(Integer, ForeignKey("employee_profiles.id", ondelete="SET NULL"), nullable=True)

    employee = relationship("EmployeeProfile", foreign_keys=[employee_profile_id])
    approved_by = relationship("EmployeeProfile", foreign_keys=[approved_by_id])
    leave_type = relationship("LeaveType")
    days = relationship("TimeOffDay", back_populates="request", cascade="all, delete-orphan", order_by="TimeOffDay.date")

    @property
    def total_hours(self) -> float:
        return sum(d.hours for d in self.days)


class TimeOffDay(Base):
    __tablename__ = "time_off_days"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("time_off_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    hours = Column(Float, nullable=False)

    request = relationship("TimeOffRequest", back_populates="days")
