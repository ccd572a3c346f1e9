from __future__ import annotations
from typing import Iterable
from uuid import UUID

from portfolio.domain.errors import NotFoundError, ValidationError
from portfolio.domain.models import Kind, RELATIONS
from portfolio.repo.memory import InMemoryRepo


class RelationSynchronizer:
    """
    Full-replacement semantics for many-to-many links: after `replace`, the
    owner's association rows are exactly the given set. Referenced entities
    are never created or deleted here.
    """
    def __init__(self, repo: InMemoryRepo):
        self.repo = repo

    def resolve(self, owner: Kind, relation: str, ids: Iterable[UUID]) -> list[UUID]:
        """Dedupe (first-seen order) and check every target exists. Unknown ids fail the whole call."""
        target = RELATIONS.get((owner, relation))
        if target is None:
            raise ValidationError(f"{owner.value} has no relation {relation!r}")
        seen: dict[UUID, None] = {}
        for i in ids:
            seen.setdefault(i, None)
        missing = [i for i in seen if not self.repo.exists(target, i)]
        if missing:
            raise NotFoundError(
                f"{target.value.replace('_', ' ').title()} {', '.join(str(m) for m in missing)}"
            )
        return list(seen)

    def resolve_all(self, owner: Kind, sets: dict[str, Iterable[UUID]]) -> dict[str, list[UUID]]:
        return {rel: self.resolve(owner, rel, ids) for rel, ids in sets.items()}

    def replace(self, owner: Kind, owner_id: UUID, relation: str, ids: Iterable[UUID]) -> list[UUID]:
        self.repo.get(owner, owner_id)
        resolved = self.resolve(owner, relation, ids)
        self.repo.set_links(owner, owner_id, relation, resolved)
        return resolved
