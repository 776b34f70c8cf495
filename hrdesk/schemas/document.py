from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional


class FolderCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    is_private: bool = False


class FolderAccessibility(BaseModel):
    is_private: bool


class FileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    url: str
    uploaded_by_id: Optional[int] = None
    uploaded_at: Optional[datetime] = None


class FolderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    created_by_id: int
    created_for_id: int
    is_private: bool
    created_at: Optional[datetime] = None
    files: List[FileResponse] = []


class SignatureRequestCreate(BaseModel):
    folder_id: int
    file_id: int
    message: Optional[str] = None


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    folder_id: Optional[int] = None
    file_id: Optional[int] = None
    created_by_id: Optional[int] = None
    created_for_id: int
    message: Optional[str] = None
    is_read: bool
    created_at: Optional[datetime] = None
