from typing import List, Optional
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlmodel import Session
from repokit.database.manager import DatabaseManager
from repokit.repository.inputs import InputBag
from repokit.repository.unit_of_work import UnitOfWork
from repokit.response import ResponseModel
from ..repository import SiteSettingRepository, UserRepository

router = APIRouter()

class BatchDeleteSchema(BaseModel):
    ids: List[int]

def get_db():
    manager = DatabaseManager.get_instance()
    yield from manager.sql.get_session()

async def get_inputs(request: Request) -> InputBag:
    """Dependency: snapshot request input for the repositories."""
    return await InputBag.from_request(request)

def get_uow(
    db: Session = Depends(get_db),
    inputs: InputBag = Depends(get_inputs),
) -> UnitOfWork:
    """Dependency: create UnitOfWork."""
    return UnitOfWork(session=db, inputs=inputs)

@router.get("/users")
def list_users(
    per_page: Optional[int] = None,
    company_id: Optional[int] = None,
    uow: UnitOfWork = Depends(get_uow),
):
    """Paginated users; `page` query param selects the page."""
    repo = uow.get_repository(UserRepository)
    if company_id is not None:
        repo.scope("of_company", company_id)
    page = repo.order_by("id").paginate(per_page)
    return ResponseModel.page(page, serializer=repo.to_dict)

@router.get("/users/{user_id}")
def get_user(user_id: int, uow: UnitOfWork = Depends(get_uow)):
    repo = uow.get_repository(UserRepository)
    user = repo.with_(["company"]).find(user_id)
    data = repo.to_dict(user)
    data["company"] = user.company.name if user.company else None
    return ResponseModel.success(data=data)

@router.post("/users")
def save_user(uow: UnitOfWork = Depends(get_uow)):
    """Create a user, or fully replace the one whose `id` is posted."""
    with uow:
        repo = uow.get_repository(UserRepository)
        user = repo.create_or_update_from_request()
        data = repo.to_dict(user)
    return ResponseModel.success(data=data)

@router.delete("/users")
def delete_user(uow: UnitOfWork = Depends(get_uow)):
    """Delete the user whose `id` is in the request input."""
    with uow:
        uow.get_repository(UserRepository).delete_from_request()
    return ResponseModel.success()

@router.post("/users/batch-delete")
def batch_delete_users(data: BatchDeleteSchema, uow: UnitOfWork = Depends(get_uow)):
    with uow:
        deleted = uow.get_repository(UserRepository).delete_multiple_from_primaries(data.ids)
    return ResponseModel.success(data={"deleted": deleted})

@router.get("/settings")
def get_settings(uow: UnitOfWork = Depends(get_uow)):
    with uow:
        repo = uow.get_repository(SiteSettingRepository)
        data = repo.to_dict(repo.current())
    return ResponseModel.success(data=data)

@router.post("/settings")
def save_settings(uow: UnitOfWork = Depends(get_uow)):
    """Partial submissions clear the settings fields they omit."""
    with uow:
        repo = uow.get_repository(SiteSettingRepository)
        current = repo.current()
        setting = repo.create_or_update_from_request(attributes_to_add_or_replace={"id": current.id})
        data = repo.to_dict(setting)
    return ResponseModel.success(data=data)
