from uuid import UUID

from fastapi import APIRouter, Depends, status
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData

from portfolio.api.deps import no_store, parse_form, read_form, read_upload, read_uploads, require_admin
from portfolio.domain.dtos import ProjectIn, ProjectOut, ProjectUpdateIn
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache
from portfolio.services.files import FileStore
from portfolio.services.projections import ProjectionService
from portfolio.services.projects import ProjectService
from portfolio.singletons import get_cache, get_files, get_repo

router = APIRouter(prefix="/v1/projects", tags=["projects"], dependencies=[Depends(require_admin)])

def get_project_service(
    repo: InMemoryRepo = Depends(get_repo),
    files: FileStore = Depends(get_files),
    cache: ProjectionCache = Depends(get_cache),
) -> ProjectService:
    return ProjectService(repo, files, cache)

def get_views(repo: InMemoryRepo = Depends(get_repo)) -> ProjectionService:
    return ProjectionService(repo)

@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProjectOut)
async def create_project(form: FormData = Depends(read_form), svc: ProjectService = Depends(get_project_service)):
    body = parse_form(ProjectIn, form)
    thumbnail = await read_upload(form, "thumbnail")
    photos = await read_uploads(form, "photo")
    return await run_in_threadpool(svc.create, body, thumbnail, photos)

@router.get("", response_model=list[ProjectOut], dependencies=[Depends(no_store)])
def list_projects(views: ProjectionService = Depends(get_views)):
    return views.projects()

@router.get("/{project_id}", response_model=ProjectOut, dependencies=[Depends(no_store)])
def get_project(project_id: UUID, views: ProjectionService = Depends(get_views)):
    return views.project(project_id)

@router.put("/{project_id}", response_model=ProjectOut)
async def update_project(
    project_id: UUID,
    form: FormData = Depends(read_form),
    svc: ProjectService = Depends(get_project_service),
):
    body = parse_form(ProjectUpdateIn, form)
    thumbnail = await read_upload(form, "thumbnail")
    photos = await read_uploads(form, "photo")
    return await run_in_threadpool(svc.update, project_id, body, thumbnail, photos)

@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: UUID, svc: ProjectService = Depends(get_project_service)):
    svc.delete(project_id)
