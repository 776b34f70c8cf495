"""
Employee document folders, uploaded files and signature-request notifications.
"""
from typing import Callable, List

from sqlalchemy.orm import selectinload

from hrdesk.core.exceptions import DependencyFailureError, NotAuthorizedError, NotFoundError
from hrdesk.models.document import File, Folder
from hrdesk.models.notification import Notification
from hrdesk.schemas.document import FolderCreate, SignatureRequestCreate
from hrdesk.services.base import BaseService
from hrdesk.services.employees import get_employee
from hrdesk.services.membership import ResolvedMembership, require_self_manager_or_owner
from hrdesk.services.storage import BlobStorage, StorageError

SIGNATURE_REQUEST = "signature_request"


def visible_to(folder: Folder, viewer_profile_id: int, employee_id: int) -> bool:
    """
    The employee sees public folders and the ones they created. Anyone else
    sees everything except private folders the employee created.
    """
    if not folder.is_private or folder.created_by_id == viewer_profile_id:
        return True
    if viewer_profile_id == employee_id:
        return False
    return folder.created_by_id != employee_id


def store_upload(storage: BlobStorage, filename: str, content: bytes, content_type: str = "") -> str:
    try:
        return storage.save(filename, content, content_type)
    except StorageError as e:
        raise DependencyFailureError("File could not be stored", details={"reason": str(e)})


class DocumentService(BaseService):
    def __init__(self, db, membership: ResolvedMembership):
        super().__init__(db, membership.company_id)
        self.membership = membership

    def _folder(self, employee_id: int, folder_id: int) -> Folder:
        folder = (
            self.db.query(Folder)
            .filter(
                Folder.id == folder_id,
                Folder.company_id == self.company_id,
                Folder.created_for_id == employee_id,
            )
            .first()
        )
        if not folder:
            raise NotFoundError("Folder not found")
        return folder

    def _folders_for(self, employee_id: int) -> List[Folder]:
        return (
            self.db.query(Folder)
            .options(selectinload(Folder.files))
            .filter(Folder.company_id == self.company_id, Folder.created_for_id == employee_id)
            .order_by(Folder.id)
            .all()
        )

    def create_folder(self, employee_id: int, data: FolderCreate) -> Folder:
        employee = get_employee(self.db, self.company_id, employee_id)
        folder = Folder(
            company_id=self.company_id,
            name=data.name,
            description=data.description,
            is_private=data.is_private,
            created_by_id=self.membership.employee_profile_id,
            created_for_id=employee.id,
        )
        self.db.add(folder)
        self.commit()
        self.db.refresh(folder)
        return folder

    def list_folders(self, employee_id: int) -> List[Folder]:
        employee = get_employee(self.db, self.company_id, employee_id)
        require_self_manager_or_owner(self.membership, employee)
        viewer = self.membership.employee_profile_id
        return [f for f in self._folders_for(employee.id) if visible_to(f, viewer, employee.id)]

    def upload_file(self, employee_id: int, folder_id: int, filename: str, store: Callable[[], str]) -> File:
        employee = get_employee(self.db, self.company_id, employee_id)
        folder = self._folder(employee.id, folder_id)
        file = File(folder_id=folder.id, name=filename, url=store(), uploaded_by_id=self.membership.employee_profile_id)
        self.db.add(file)
        self.commit()
        self.db.refresh(file)
        return file

    def delete_file(self, employee_id: int, folder_id: int, file_id: int):
        employee = get_employee(self.db, self.company_id, employee_id)
        folder = self._folder(employee.id, folder_id)
        file = self.db.query(File).filter(File.id == file_id, File.folder_id == folder.id).first()
        if not file:
            raise NotFoundError("File not found")
        self.db.delete(file)
        self.commit()

    def change_accessibility(self, employee_id: int, folder_id: int, is_private: bool) -> Folder:
        employee = get_employee(self.db, self.company_id, employee_id)
        folder = self._folder(employee.id, folder_id)
        if folder.created_by_id != self.membership.employee_profile_id:
            raise NotAuthorizedError("You are not authorized to change folder accessibility")
        folder.is_private = is_private
        self.commit()
        self.db.refresh(folder)
        return folder

    def signable_files(self, employee_id: int) -> List[Folder]:
        employee = get_employee(self.db, self.company_id, employee_id)
        return self._folders_for(employee.id)

    def request_signature(self, employee_id: int, data: SignatureRequestCreate) -> Notification:
        employee = get_employee(self.db, self.company_id, employee_id)
        folder = self._folder(employee.id, data.folder_id)
        if not any(f.id == data.file_id for f in folder.files):
            raise NotFoundError("File not found")

        notification = Notification(
            company_id=self.company_id,
            type=SIGNATURE_REQUEST,
            folder_id=folder.id,
            file_id=data.file_id,
            created_by_id=self.membership.employee_profile_id,
            created_for_id=employee.id,
            message=data.message,
        )
        self.db.add(notification)
        self.commit()
        self.db.refresh(notification)
        self.log_info("Signature requested", employee_id=employee.id, file_id=data.file_id)
        return notification

    def notifications(self) -> List[Notification]:
        return (
            self.db.query(Notification)
            .filter(
                Notification.company_id == self.company_id,
                Notification.created_for_id == self.membership.employee_profile_id,
            )
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    def mark_read(self, notification_id: int) -> Notification:
        notification = (
            self.db.query(Notification)
            .filter(
                Notification.id == notification_id,
                Notification.company_id == self.company_id,
                Notification.created_for_id == self.membership.employee_profile_id,
            )
            .first()
        )
        if not notification:
            raise NotFoundError("Notification not found")
        notification.is_read = True
        self.commit()
        self.db.refresh(notification)
        return notification
