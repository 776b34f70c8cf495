"""
Typed add/update/remove over the closed set of employee history collections.

The collection name arrives from the client as a string and is validated
against `HistoryCollection` before anything is read.
"""
import enum
from dataclasses import dataclass
from typing import Any, Dict, Type

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from hrdesk.core.exceptions import InvalidInputError, NotFoundError
from hrdesk.models.employee import EmployeeProfile
from hrdesk.models.employee_history import (
    AssetEntry, BonusEntry, CompensationEntry, EducationEntry,
    EmploymentStatusEntry, JobInformation, VisaInfoEntry,
)
from hrdesk.schemas import history as schemas
from hrdesk.services.base import BaseService
from hrdesk.services.employees import get_employee
from hrdesk.services.membership import ResolvedMembership, require_manager_or_owner


class HistoryCollection(str, enum.Enum):
    JOB_INFORMATION = "jobInformation"
    EDUCATION = "education"
    VISA_INFO = "visaInfo"
    EMPLOYMENT_STATUS_HISTORY = "employmentStatusHistory"
    COMPENSATION_HISTORY = "compensationHistory"
    BONUSES = "bonuses"
    ASSETS = "assets"


@dataclass(frozen=True)
class CollectionSpec:
    model: Type
    schema_in: Type[BaseModel]
    schema_out: Type[BaseModel]


REGISTRY: Dict[HistoryCollection, CollectionSpec] = {
    HistoryCollection.JOB_INFORMATION: CollectionSpec(JobInformation, schemas.JobInformationIn, schemas.JobInformationOut),
    HistoryCollection.EDUCATION: CollectionSpec(EducationEntry, schemas.EducationIn, schemas.EducationOut),
    HistoryCollection.VISA_INFO: CollectionSpec(VisaInfoEntry, schemas.VisaInfoIn, schemas.VisaInfoOut),
    HistoryCollection.EMPLOYMENT_STATUS_HISTORY: CollectionSpec(EmploymentStatusEntry, schemas.EmploymentStatusIn, schemas.EmploymentStatusOut),
    HistoryCollection.COMPENSATION_HISTORY: CollectionSpec(CompensationEntry, schemas.CompensationIn, schemas.CompensationOut),
    HistoryCollection.BONUSES: CollectionSpec(BonusEntry, schemas.BonusIn, schemas.BonusOut),
    HistoryCollection.ASSETS: CollectionSpec(AssetEntry, schemas.AssetIn, schemas.AssetOut),
}


def parse_collection(name: str) -> HistoryCollection:
    try:
        return HistoryCollection(name)
    except ValueError:
        raise InvalidInputError(
            "Field name is not allowed",
            details={"allowed": [c.value for c in HistoryCollection]},
        )


def _validate(schema: Type[BaseModel], payload: Dict[str, Any]) -> BaseModel:
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise InvalidInputError("Invalid field value", details={"errors": e.errors(include_url=False, include_context=False)})


class EmployeeHistoryService(BaseService):
    def __init__(self, db: Session, membership: ResolvedMembership):
        super().__init__(db, membership.company_id)
        self.membership = membership

    def _authorized_employee(self, employee_id: int) -> EmployeeProfile:
        employee = get_employee(self.db, self.company_id, employee_id)
        require_manager_or_owner(self.membership, employee)
        return employee

    def _check_reports_to(self, employee: EmployeeProfile, values: Dict[str, Any]):
        reports_to_id = values.get("reports_to_id")
        if reports_to_id is None:
            return
        if reports_to_id == employee.id:
            raise InvalidInputError("An employee cannot report to themself")
        get_employee(self.db, self.company_id, reports_to_id)

    def _get_entry(self, spec: CollectionSpec, employee: EmployeeProfile, entry_id: int):
        entry = (
            self.db.query(spec.model)
            .filter(spec.model.id == entry_id, spec.model.employee_profile_id == employee.id)
            .first()
        )
        if not entry:
            raise NotFoundError("Field item not found")
        return entry

    def add(self, employee_id: int, collection: str, value: Dict[str, Any]) -> BaseModel:
        spec = REGISTRY[parse_collection(collection)]
        employee = self._authorized_employee(employee_id)
        data = _validate(spec.schema_in, value).model_dump()
        self._check_reports_to(employee, data)

        entry = spec.model(employee_profile_id=employee.id, **data)
        self.db.add(entry)
        self.commit()
        self.db.refresh(entry)
        self.log_info("History entry added", employee_id=employee.id, collection=collection, entry_id=entry.id)
        return spec.schema_out.model_validate(entry)

    def update(self, employee_id: int, collection: str, entry_id: int, value: Dict[str, Any]) -> BaseModel:
        spec = REGISTRY[parse_collection(collection)]
        employee = self._authorized_employee(employee_id)
        entry = self._get_entry(spec, employee, entry_id)
        data = _validate(spec.schema_in, value).model_dump()
        self._check_reports_to(employee, data)

        for field, v in data.items():
            setattr(entry, field, v)
        self.commit()
        self.db.refresh(entry)
        return spec.schema_out.model_validate(entry)

    def remove(self, employee_id: int, collection: str, entry_id: int):
        spec = REGISTRY[parse_collection(collection)]
        employee = self._authorized_employee(employee_id)
        entry = self._get_entry(spec, employee, entry_id)
        self.db.delete(entry)
        self.commit()
        self.log_info("History entry removed", employee_id=employee.id, collection=collection, entry_id=entry_id)
