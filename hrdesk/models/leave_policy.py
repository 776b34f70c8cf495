from sqlalchemy import Column, Integer, String, ForeignKey, Table
from sqlalchemy.orm import relationship
from hrdesk.database import Base

leave_policy_types = Table(
    "leave_policy_types",
    Base.metadata,
    Column("leave_policy_id", Integer, ForeignKey("leave_policies.id", ondelete="CASCADE"), primary_key=True),
    Column("leave_type_id", Integer, ForeignKey("leave_types.id", ondelete="CASCADE"), primary_key=True),
)


class LeavePolicy(Base):
    """Per-company named bundle of leave types, assigned to employees at creation."""
    __tablename__ = "leave_policies"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)

    company = relationship("Company", back_populates="leave_policies")
    leave_types = relationship("LeaveType", secondary=leave_policy_types, order_by="LeaveType.id")
