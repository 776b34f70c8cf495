"""
Effective-dated history collections embedded in an employee profile.
The set is closed; see hrdesk.services.employee_history for the registry.
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, Float, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship, declared_attr
from hrdesk.database import Base


class HistoryEntryMixin:
    id = Column(Integer, primary_key=True, index=True)
    effective_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @declared_attr
    def employee_profile_id(cls):
        return Column(Integer, ForeignKey("employee_profiles.id", ondelete="CASCADE"), nullable=False, index=True)


class JobInformation(HistoryEntryMixin, Base):
    __tablename__ = "job_information"

    job_title = Column(String, nullable=True)
    department = Column(String, nullable=True)
    division = Column(String, nullable=True)
    location = Column(String, nullable=True)
    reports_to_id = Column(Integer, ForeignKey("employee_profiles.id", ondelete="SET NULL"), nullable=True)

    employee = relationship("EmployeeProfile", back_populates="job_information", foreign_keys="JobInformation.employee_profile_id")
    reports_to = relationship("EmployeeProfile", foreign_keys=[reports_to_id])


class EmploymentStatusEntry(HistoryEntryMixin, Base):
    __tablename__ = "employment_status_history"

    status = Column(String, nullable=False)
    comment = Column(Text, nullable=True)

    employee = relationship("EmployeeProfile", back_populates="employment_status_history")


class CompensationEntry(HistoryEntryMixin, Base):
    __tablename__ = "compensation_history"

    pay_rate = Column(Float, nullable=False)
    pay_rate_unit = Column(String, nullable=True)  # hour, week, month, year
    pay_type = Column(String, nullable=True)  # salary, hourly
    pay_schedule = Column(String, nullable=True)
    reason = Column(String, nullable=True)

    employee = relationship("EmployeeProfile", back_populates="compensation_history")


class EducationEntry(HistoryEntryMixin, Base):
    __tablename__ = "education"

    degree = Column(String, nullable=True)
    institution = Column(String, nullable=False)
    major = Column(String, nullable=True)
    gpa = Column(Float, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    employee = relationship("EmployeeProfile", back_populates="education")


class VisaInfoEntry(HistoryEntryMixin, Base):
    __tablename__ = "visa_info"

    visa_type = Column(String, nullable=False)
    issuing_country = Column(String, nullable=True)
    issued_date = Column(Date, nullable=True)
    expiration_date = Column(Date, nullable=True)
    note = Column(Text, nullable=True)

    employee = relationship("EmployeeProfile", back_populates="visa_info")


class BonusEntry(HistoryEntryMixin, Base):
    __tablename__ = "bonuses"

    amount = Column(Float, nullable=False)
    reason = Column(String, nullable=True)

    employee = relationship("EmployeeProfile", back_populates="bonuses")


class AssetEntry(HistoryEntryMixin, Base):
    __tablename__ = "assets"

    category = Column(String, nullable=False)
    description = Column(String, nullable=True)
    serial_number = Column(String, nullable=True)
    assigned_date = Column(Date, nullable=True)
    returned_date = Column(Date, nullable=True)

    employee = relationship("EmployeeProfile", back_populates="assets")
