from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class RoleCreate(BaseModel):
    name: str = Field(min_length=1)
    permissions: List[str] = []


class RoleUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    permissions: Optional[List[str]] = None


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    permissions: List[str] = []
