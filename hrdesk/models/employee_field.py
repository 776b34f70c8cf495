from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from hrdesk.database import Base
import enum


class FieldCategory(str, enum.Enum):
    DEGREE = "degree"
    DEPARTMENT = "department"
    DIVISION = "division"
    EMPLOYMENT_STATUS = "employmentStatus"
    JOB_TITLE = "jobTitle"
    VISA_TYPE = "visaType"
    ASSET_CATEGORY = "assetCategory"


class EmployeeFieldOption(Base):
    """One picklist value a company offers for an employee field."""
    __tablename__ = "employee_field_options"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String, nullable=False, index=True)
    label = Column(String, nullable=False)
    value = Column(String, nullable=False)

    company = relationship("Company", back_populates="field_options")
