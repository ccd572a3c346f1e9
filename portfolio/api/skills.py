from uuid import UUID

from fastapi import APIRouter, Depends, status
from starlette.datastructures import FormData

from portfolio.api.deps import no_store, parse_form, read_form, require_admin
from portfolio.domain.dtos import SkillIn, SkillOut
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache
from portfolio.services.projections import ProjectionService
from portfolio.services.skills import SkillService
from portfolio.singletons import get_cache, get_repo

router = APIRouter(prefix="/v1/skills", tags=["skills"], dependencies=[Depends(require_admin)])

def get_skill_service(
    repo: InMemoryRepo = Depends(get_repo),
    cache: ProjectionCache = Depends(get_cache),
) -> SkillService:
    return SkillService(repo, cache)

def get_views(repo: InMemoryRepo = Depends(get_repo)) -> ProjectionService:
    return ProjectionService(repo)

@router.post("", status_code=status.HTTP_201_CREATED, response_model=SkillOut)
def create_skill(form: FormData = Depends(read_form), svc: SkillService = Depends(get_skill_service)):
    return svc.create(parse_form(SkillIn, form))

@router.get("", response_model=list[SkillOut], dependencies=[Depends(no_store)])
def list_skills(views: ProjectionService = Depends(get_views)):
    return views.skills()

@router.get("/{skill_id}", response_model=SkillOut, dependencies=[Depends(no_store)])
def get_skill(skill_id: UUID, views: ProjectionService = Depends(get_views)):
    return views.skill(skill_id)

@router.put("/{skill_id}", response_model=SkillOut)
def update_skill(skill_id: UUID, form: FormData = Depends(read_form), svc: SkillService = Depends(get_skill_service)):
    return svc.update(skill_id, parse_form(SkillIn, form))

@router.delete("/{skill_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_skill(skill_id: UUID, svc: SkillService = Depends(get_skill_service)):
    svc.delete(skill_id)
