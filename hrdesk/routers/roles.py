from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hrdesk.core.constants import PROTECTED_ROLES
from hrdesk.core.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from hrdesk.core.schemas import ApiResponse
from hrdesk.database import get_db
from hrdesk.models.employee import EmployeeProfile
from hrdesk.models.user import Membership, Role
from hrdesk.routers.deps import get_current_user
from hrdesk.schemas.role import RoleCreate, RoleResponse, RoleUpdate

router = APIRouter(
    prefix="/roles",
    tags=["roles"],
    dependencies=[Depends(get_current_user)],
)


def _get_role(db: Session, role_id: int) -> Role:
    role = db.get(Role, role_id)
    if not role:
        raise NotFoundError(f"Role not found with id of {role_id}")
    return role


def _check_name_free(db: Session, name: str, role_id: int = None):
    existing = db.query(Role).filter(Role.name == name).first()
    if existing and existing.id != role_id:
        raise InvalidInputError(f"Role '{name}' already exists")


@router.get("", response_model=ApiResponse[List[RoleResponse]])
def list_roles(db: Session = Depends(get_db)):
    roles = db.query(Role).order_by(Role.id).all()
    return ApiResponse.ok([RoleResponse.model_validate(r) for r in roles])


@router.post("", response_model=ApiResponse[RoleResponse], status_code=201)
def create_role(data: RoleCreate, db: Session = Depends(get_db)):
    _check_name_free(db, data.name)
    role = Role(name=data.name, permissions=data.permissions)
    db.add(role)
    db.commit()
    db.refresh(role)
    return ApiResponse.ok(RoleResponse.model_validate(role))


@router.get("/{role_id}", response_model=ApiResponse[RoleResponse])
def get_role(role_id: int, db: Session = Depends(get_db)):
    return ApiResponse.ok(RoleResponse.model_validate(_get_role(db, role_id)))


@router.put("/{role_id}", response_model=ApiResponse[RoleResponse])
def update_role(role_id: int, data: RoleUpdate, db: Session = Depends(get_db)):
    role = _get_role(db, role_id)
    if data.name is not None and data.name != role.name:
        if role.name in PROTECTED_ROLES:
            raise InvalidStateError(f"Role '{role.name}' cannot be renamed")
        _check_name_free(db, data.name, role.id)
        role.name = data.name
    if data.permissions is not None:
        role.permissions = data.permissions
    db.commit()
    db.refresh(role)
    return ApiResponse.ok(RoleResponse.model_validate(role))


@router.delete("/{role_id}", response_model=ApiResponse[dict])
def delete_role(role_id: int, db: Session = Depends(get_db)):
    role = _get_role(db, role_id)
    if role.name in PROTECTED_ROLES:
        raise InvalidStateError(f"Role '{role.name}' cannot be deleted")
    in_use = (
        db.query(Membership.id).filter(Membership.role_id == role.id).first()
        or db.query(EmployeeProfile.id).filter(EmployeeProfile.role_id == role.id).first()
    )
    if in_use:
        raise InvalidStateError(f"Role '{role.name}' is still assigned")
    db.delete(role)
    db.commit()
    return ApiResponse.ok({})
