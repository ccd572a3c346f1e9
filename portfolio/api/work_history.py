from uuid import UUID

from fastapi import APIRouter, Depends, status
from starlette.datastructures import FormData

from portfolio.api.deps import no_store, parse_form, read_form, require_admin
from portfolio.domain.dtos import WorkHistoryIn, WorkHistoryOut
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache
from portfolio.services.projections import ProjectionService
from portfolio.services.work_history import WorkHistoryService
from portfolio.singletons import get_cache, get_repo

router = APIRouter(prefix="/v1/work-history", tags=["work-history"], dependencies=[Depends(require_admin)])

def get_work_history_service(
    repo: InMemoryRepo = Depends(get_repo),
    cache: ProjectionCache = Depends(get_cache),
) -> WorkHistoryService:
    return WorkHistoryService(repo, cache)

def get_views(repo: InMemoryRepo = Depends(get_repo)) -> ProjectionService:
    return ProjectionService(repo)

@router.post("", status_code=status.HTTP_201_CREATED, response_model=WorkHistoryOut)
def create_work_history(form: FormData = Depends(read_form), svc: WorkHistoryService = Depends(get_work_history_service)):
    return svc.create(parse_form(WorkHistoryIn, form))

@router.get("", response_model=list[WorkHistoryOut], dependencies=[Depends(no_store)])
def list_work_history(views: ProjectionService = Depends(get_views)):
    return views.work_history()

@router.get("/{item_id}", response_model=WorkHistoryOut, dependencies=[Depends(no_store)])
def get_work_history(item_id: UUID, views: ProjectionService = Depends(get_views)):
    return views.work_history_item(item_id)

@router.put("/{item_id}", response_model=WorkHistoryOut)
def update_work_history(
    item_id: UUID,
    form: FormData = Depends(read_form),
    svc: WorkHistoryService = Depends(get_work_history_service),
):
    return svc.update(item_id, parse_form(WorkHistoryIn, form))

@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_work_history(item_id: UUID, svc: WorkHistoryService = Depends(get_work_history_service)):
    svc.delete(item_id)
