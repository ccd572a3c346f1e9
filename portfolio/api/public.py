# portfolio/api/public.py
from __future__ import annotations
from fastapi import APIRouter, Depends

from portfolio.api.deps import public_cache
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.cache import ProjectionCache
from portfolio.services.projections import ProjectionService
from portfolio.singletons import get_cache, get_repo

router = APIRouter(prefix="/v1/public", tags=["public"], dependencies=[Depends(public_cache)])

def get_cached_views(
    repo: InMemoryRepo = Depends(get_repo),
    cache: ProjectionCache = Depends(get_cache),
) -> ProjectionService:
    return ProjectionService(repo, cache)

@router.get("/home")
def home(views: ProjectionService = Depends(get_cached_views)):
    """Profile aggregate with every project attached, or [] before a profile exists."""
    return views.public("home")

@router.get("/projects")
def projects(views: ProjectionService = Depends(get_cached_views)):
    return views.public("projects")

@router.get("/skills")
def skills(views: ProjectionService = Depends(get_cached_views)):
    return views.public("skills")

@router.get("/work-history")
def work_history(views: ProjectionService = Depends(get_cached_views)):
    return views.public("work_history")

@router.get("/social-links")
def social_links(views: ProjectionService = Depends(get_cached_views)):
    return views.public("social_links")
