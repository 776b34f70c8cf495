from sqlalchemy import Column, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from hrdesk.database import Base


class TimeLog(Base):
    """
    One work session. A row with clock_in set and clock_out unset is "open".
    Timestamps are naive local server time.
    """
    __tablename__ = "time_logs"
    __table_args__ = (
        Index("ix_time_logs_employee_date", "employee_profile_id", "date"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_profile_id = Column(Integer, ForeignKey("employee_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(DateTime, nullable=False)
    clock_in = Column(DateTime, nullable=False)
    break_start = Column(DateTime, nullable=True)
    break_end = Column(DateTime, nullable=True)
    clock_out = Column(DateTime, nullable=True)

    employee = relationship("EmployeeProfile")

    @property
    def is_open(self) -> bool:
        return self.clock_in is not None and self.clock_out is None
