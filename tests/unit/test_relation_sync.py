from uuid import uuid4

import pytest

from portfolio.domain.errors import NotFoundError, ValidationError
from portfolio.domain.models import Kind, Project, Skill
from portfolio.repo.memory import InMemoryRepo
from portfolio.services.relations import RelationSynchronizer


def _setup():
    repo = InMemoryRepo()
    skills = [Skill(name=n) for n in ("python", "react", "docker")]
    for s in skills:
        repo.commit(Kind.skill, s, op="create")
    project = Project(title="Site", description="x")
    repo.commit(Kind.project, project, op="create")
    return repo, project, skills


def test_replace_sets_exactly_the_given_ids():
    repo, project, (py, react, docker) = _setup()
    sync = RelationSynchronizer(repo)

    sync.replace(Kind.project, project.id, "skills", [py.id, react.id])
    assert repo.related(Kind.project, project.id, "skills") == [py.id, react.id]

    sync.replace(Kind.project, project.id, "skills", [docker.id])
    assert repo.related(Kind.project, project.id, "skills") == [docker.id]

    sync.replace(Kind.project, project.id, "skills", [])
    assert repo.related(Kind.project, project.id, "skills") == []


def test_missing_target_leaves_links_untouched():
    repo, project, (py, _, _) = _setup()
    sync = RelationSynchronizer(repo)
    sync.replace(Kind.project, project.id, "skills", [py.id])

    with pytest.raises(NotFoundError):
        sync.replace(Kind.project, project.id, "skills", [py.id, uuid4()])
    assert repo.related(Kind.project, project.id, "skills") == [py.id]


def test_unknown_relation_and_owner():
    repo, project, _ = _setup()
    sync = RelationSynchronizer(repo)
    with pytest.raises(ValidationError):
        sync.resolve(Kind.skill, "projects", [])
    with pytest.raises(NotFoundError):
        sync.replace(Kind.project, uuid4(), "skills", [])


def test_resolve_dedupes_in_first_seen_order():
    repo, _, (py, react, _) = _setup()
    sync = RelationSynchronizer(repo)
    assert sync.resolve(Kind.project, "skills", [react.id, py.id, react.id]) == [react.id, py.id]
