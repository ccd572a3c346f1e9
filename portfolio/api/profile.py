from uuid import UUID

from fastapi import APIRouter, Depends, status
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData

from portfolio.api.deps import no_store, parse_form, read_form, read_upload, require_admin
from portfolio.domain.dtos import ProfileIn, ProfileOut, ProfileUpdateIn
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache
from portfolio.services.files import FileStore
from portfolio.services.profiles import ProfileService
from portfolio.services.projections import ProjectionService
from portfolio.singletons import get_cache, get_files, get_repo

router = APIRouter(prefix="/v1/profile", tags=["profile"], dependencies=[Depends(require_admin)])

def get_profile_service(
    repo: InMemoryRepo = Depends(get_repo),
    files: FileStore = Depends(get_files),
    cache: ProjectionCache = Depends(get_cache),
) -> ProfileService:
    return ProfileService(repo, files, cache)

def get_views(repo: InMemoryRepo = Depends(get_repo)) -> ProjectionService:
    return ProjectionService(repo)

@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProfileOut)
async def create_profile(form: FormData = Depends(read_form), svc: ProfileService = Depends(get_profile_service)):
    body = parse_form(ProfileIn, form)
    image = await read_upload(form, "image")
    return await run_in_threadpool(svc.create, body, image)

@router.get("", response_model=list[ProfileOut], dependencies=[Depends(no_store)])
def list_profiles(views: ProjectionService = Depends(get_views)):
    return views.profiles()

@router.get("/{profile_id}", response_model=ProfileOut, dependencies=[Depends(no_store)])
def get_profile(profile_id: UUID, views: ProjectionService = Depends(get_views)):
    return views.profile(profile_id)

@router.put("/{profile_id}", response_model=ProfileOut)
async def update_profile(
    profile_id: UUID,
    form: FormData = Depends(read_form),
    svc: ProfileService = Depends(get_profile_service),
):
    body = parse_form(ProfileUpdateIn, form)
    image = await read_upload(form, "image")
    return await run_in_threadpool(svc.update, profile_id, body, image)

@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_profile(profile_id: UUID, svc: ProfileService = Depends(get_profile_service)):
    svc.delete(profile_id)
