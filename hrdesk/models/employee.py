"""
Employee profile: the HR record of one person at one company.
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hrdesk.database import Base


class EmployeeProfile(Base):
    __tablename__ = "employee_profiles"
    __table_args__ = (
        UniqueConstraint("company_id", "employee_number", name="uq_employee_company_number"),
        # Ids of deleted profiles are never handed out again
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_number = Column(Integer, nullable=False)

    first_name = Column(String, nullable=False)
    middle_name = Column(String, nullable=True)
    last_name = Column(String, nullable=False)
    dob = Column(Date, nullable=True)
    gender = Column(String, nullable=True)
    marital_status = Column(String, nullable=True)
    ssn_encrypted = Column(String, nullable=True)
    ethnicity = Column(String, nullable=True)

    street1 = Column(String, nullable=True)
    street2 = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip = Column(String, nullable=True)
    country = Column(String, nullable=True)

    work_phone = Column(String, nullable=True)
    mobile_phone = Column(String, nullable=True)
    work_email = Column(String, nullable=True)
    home_email = Column(String, nullable=True)

    hiring_date = Column(Date, nullable=True)
    image_url = Column(String, nullable=True)
    login_access = Column(Boolean, default=False, nullable=False)

    # Role granted when the invite is accepted
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=True)
    leave_policy_id = Column(Integer, ForeignKey("leave_policies.id", ondelete="SET NULL"), nullable=True)

    onboarding_token = Column(String, nullable=True, index=True)
    onboarding_token_expires = Column(DateTime, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    company = relationship("Company", back_populates="employees")
    role = relationship("Role")
    leave_policy = relationship("LeavePolicy")
    membership = relationship("Membership", back_populates="employee_profile", uselist=False)
    leave_balances = relationship("LeaveBalance", back_populates="employee", cascade="all, delete-orphan")

    # Append-only history collections
    job_information = relationship(
        "JobInformation", back_populates="employee", cascade="all, delete-orphan",
        foreign_keys="JobInformation.employee_profile_id",
    )
    employment_status_history = relationship("EmploymentStatusEntry", back_populates="employee", cascade="all, delete-orphan")
    compensation_history = relationship("CompensationEntry", back_populates="employee", cascade="all, delete-orphan")
    education = relationship("EducationEntry", back_populates="employee", cascade="all, delete-orphan")
    visa_info = relationship("VisaInfoEntry", back_populates="employee", cascade="all, delete-orphan")
    bonuses = relationship("BonusEntry", back_populates="employee", cascade="all, delete-orphan")
    assets = relationship("AssetEntry", back_populates="employee", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<EmployeeProfile #{self.employee_number} {self.first_name} {self.last_name}>"

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p)

    @property
    def current_job(self):
        """Most recent job-information entry by effective date, or None."""
        return latest_entry(self.job_information)

    @property
    def reports_to_id(self):
        job = self.current_job
        return job.reports_to_id if job else None


def latest_entry(entries):
    """The "current" value of a history list: effective_date descending, newest id breaks ties."""
    if not entries:
        return None
    return sorted(entries, key=lambda e: (e.effective_date, e.id or 0), reverse=True)[0]
