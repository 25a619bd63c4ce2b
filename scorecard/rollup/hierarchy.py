"""Breadth-first walks over the organization tree, by repeated id lookups."""
import logging
from typing import Callable, Iterable, List, Sequence

from sqlalchemy.orm import Session

from scorecard.models import Organization

logger = logging.getLogger(__name__)

# Keeps each IN (...) clause well under driver parameter limits
FRONTIER_CHUNK_SIZE = 500

ChildLookup = Callable[[Sequence], Iterable]


def collect_descendants(root_id, fetch_children: ChildLookup) -> List:
    """Return every descendant id of ``root_id``, level by level.

    ``fetch_children(frontier)`` yields the ids whose parent is in ``frontier``.
    Ids already seen are skipped, so a corrupted (cyclic) hierarchy still
    terminates.
    """
    visited = {root_id}
    descendants: List = []
    frontier = [root_id]
    while frontier:
        found = []
        for child_id in fetch_children(frontier):
            if child_id in visited:
                continue
            visited.add(child_id)
            found.append(child_id)
        if not found:
            break
        descendants.extend(found)
        frontier = found
    return descendants


def get_descendant_organization_ids(db: Session, organization_id) -> List:
    def fetch_children(frontier: Sequence) -> List:
        children = []
        for start in range(0, len(frontier), FRONTIER_CHUNK_SIZE):
            chunk = list(frontier[start:start + FRONTIER_CHUNK_SIZE])
            rows = (
                db.query(Organization.id)
                .filter(Organization.parent_id.in_(chunk))
                .order_by(Organization.created_at, Organization.name)
                .all()
            )
            children.extend(row[0] for row in rows)
        return children

    descendants = collect_descendants(organization_id, fetch_children)
    logger.info(f"🌳 [Hierarchy] Found {len(descendants)} descendant organizations for {organization_id}")
    return descendants
