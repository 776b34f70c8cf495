from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from hrdesk.core.schemas import ApiResponse
from hrdesk.database import get_db
from hrdesk.routers.deps import get_membership
from hrdesk.schemas.document import (
    FileResponse,
    FolderAccessibility,
    FolderCreate,
    FolderResponse,
    NotificationResponse,
    SignatureRequestCreate,
)
from hrdesk.services.documents import DocumentService, store_upload
from hrdesk.services.membership import ResolvedMembership
from hrdesk.services.storage import BlobStorage, get_blob_storage

router = APIRouter(
    prefix="/companies/{company_id}",
    tags=["documents"]
)


@router.post("/employees/{employee_id}/folders", response_model=ApiResponse[FolderResponse], status_code=201)
def create_folder(
    employee_id: int,
    data: FolderCreate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    folder = DocumentService(db, membership).create_folder(employee_id, data)
    return ApiResponse.ok(FolderResponse.model_validate(folder))


@router.get("/employees/{employee_id}/folders", response_model=ApiResponse[List[FolderResponse]])
def get_folders_and_files(
    employee_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    folders = DocumentService(db, membership).list_folders(employee_id)
    return ApiResponse.ok([FolderResponse.model_validate(f) for f in folders])


@router.post(
    "/employees/{employee_id}/folders/{folder_id}/files",
    response_model=ApiResponse[FileResponse],
    status_code=201,
)
def upload_file(
    employee_id: int,
    folder_id: int,
    file: UploadFile = File(...),
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
):
    def store() -> str:
        return store_upload(storage, file.filename, file.file.read(), file.content_type or "")

    stored = DocumentService(db, membership).upload_file(employee_id, folder_id, file.filename, store)
    return ApiResponse.ok(FileResponse.model_validate(stored))


@router.delete("/employees/{employee_id}/folders/{folder_id}/files/{file_id}", response_model=ApiResponse[dict])
def delete_file(
    employee_id: int,
    folder_id: int,
    file_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    DocumentService(db, membership).delete_file(employee_id, folder_id, file_id)
    return ApiResponse.ok({})


@router.put("/employees/{employee_id}/folders/{folder_id}/accessibility", response_model=ApiResponse[FolderResponse])
def change_folder_accessibility(
    employee_id: int,
    folder_id: int,
    data: FolderAccessibility,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    folder = DocumentService(db, membership).change_accessibility(employee_id, folder_id, data.is_private)
    return ApiResponse.ok(FolderResponse.model_validate(folder))


@router.get("/employees/{employee_id}/signable-files", response_model=ApiResponse[List[FolderResponse]])
def get_signable_files(
    employee_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    folders = DocumentService(db, membership).signable_files(employee_id)
    return ApiResponse.ok([FolderResponse.model_validate(f) for f in folders])


@router.post(
    "/employees/{employee_id}/signature-requests",
    response_model=ApiResponse[NotificationResponse],
    status_code=201,
)
def create_signature_request(
    employee_id: int,
    data: SignatureRequestCreate,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    notification = DocumentService(db, membership).request_signature(employee_id, data)
    return ApiResponse.ok(NotificationResponse.model_validate(notification))


@router.get("/notifications", response_model=ApiResponse[List[NotificationResponse]])
def get_notifications(membership: ResolvedMembership = Depends(get_membership), db: Session = Depends(get_db)):
    notifications = DocumentService(db, membership).notifications()
    return ApiResponse.ok([NotificationResponse.model_validate(n) for n in notifications])


@router.put("/notifications/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
def mark_notification_read(
    notification_id: int,
    membership: ResolvedMembership = Depends(get_membership),
    db: Session = Depends(get_db),
):
    notification = DocumentService(db, membership).mark_read(notification_id)
    return ApiResponse.ok(NotificationResponse.model_validate(notification))
