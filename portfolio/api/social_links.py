from uuid import UUID

from fastapi import APIRouter, Depends, status
from starlette.datastructures import FormData

from portfolio.api.deps import no_store, parse_form, read_form, require_admin
from portfolio.domain.dtos import SocialLinkIn, SocialLinkOut
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache
from portfolio.services.projections import ProjectionService
from portfolio.services.social_links import SocialLinkService
from portfolio.singletons import get_cache, get_repo

router = APIRouter(prefix="/v1/social-links", tags=["social-links"], dependencies=[Depends(require_admin)])

def get_social_link_service(
    repo: InMemoryRepo = Depends(get_repo),
    cache: ProjectionCache = Depends(get_cache),
) -> SocialLinkService:
    return SocialLinkService(repo, cache)

def get_views(repo: InMemoryRepo = Depends(get_repo)) -> ProjectionService:
    return ProjectionService(repo)

@router.post("", status_code=status.HTTP_201_CREATED, response_model=SocialLinkOut)
def create_social_link(form: FormData = Depends(read_form), svc: SocialLinkService = Depends(get_social_link_service)):
    return svc.create(parse_form(SocialLinkIn, form))

@router.get("", response_model=list[SocialLinkOut], dependencies=[Depends(no_store)])
def list_social_links(views: ProjectionService = Depends(get_views)):
    return views.social_links()

@router.get("/{link_id}", response_model=SocialLinkOut, dependencies=[Depends(no_store)])
def get_social_link(link_id: UUID, views: ProjectionService = Depends(get_views)):
    return views.social_link(link_id)

@router.put("/{link_id}", response_model=SocialLinkOut)
def update_social_link(
    link_id: UUID,
    form: FormData = Depends(read_form),
    svc: SocialLinkService = Depends(get_social_link_service),
):
    return svc.update(link_id, parse_form(SocialLinkIn, form))

@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_social_link(link_id: UUID, svc: SocialLinkService = Depends(get_social_link_service)):
    svc.delete(link_id)
