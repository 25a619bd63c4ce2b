"""
Scorecard replication from a template organization.

The template's element tree is copied level by level (roots first) so every
child can point at its already-mapped parent, then each attached KPI is cloned
onto its new element. Nothing here commits: the caller owns the transaction,
which makes the whole copy atomic.

Known limitation: ``calculation_equation`` is copied verbatim. Equations that
reference template KPIs by id keep pointing at the template KPIs after the copy;
remapping them is the caller's job.
"""
import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List

from sqlalchemy.orm import Session

from scorecard.models import Kpi, ScorecardElement

logger = logging.getLogger(__name__)

KPI_CONFIG_FIELDS = (
    "scoring_type",
    "calendar_frequency",
    "data_type",
    "aggregation_type",
    "decimal_precision",
    "is_manual_update",
    "calculation_equation",
    "rollup_enabled",
)


@dataclass
class ReplicationResult:
    element_id_map: Dict = field(default_factory=dict)
    kpi_id_map: Dict = field(default_factory=dict)

    @property
    def elements_created(self) -> int:
        return len(self.element_id_map)

    @property
    def kpis_created(self) -> int:
        return len(self.kpi_id_map)


def replicate_scorecard_structure(db: Session, template_organization_id, new_organization_id) -> ReplicationResult:
    logger.info(
        f"🧬 [Replicator] Replicating scorecard from template {template_organization_id} "
        f"to organization {new_organization_id}"
    )
    result = ReplicationResult()

    template_elements: List[ScorecardElement] = (
        db.query(ScorecardElement)
        .filter(ScorecardElement.organization_id == template_organization_id)
        .order_by(ScorecardElement.order_index, ScorecardElement.created_at)
        .all()
    )
    if not template_elements:
        logger.warning(f"⚠️ [Replicator] Template {template_organization_id} has no scorecard elements, skipping")
        return result

    template_ids = {element.id for element in template_elements}
    children_by_parent = defaultdict(list)
    for element in template_elements:
        # A parent outside the template would never be mapped; treat such elements as roots
        parent_id = element.parent_id if element.parent_id in template_ids else None
        children_by_parent[parent_id].append(element)

    level = children_by_parent.get(None, [])
    depth = 0
    while level:
        for element in level:
            result.element_id_map[element.id] = uuid.uuid4()

        new_rows = []
        for element in level:
            new_rows.append(
                ScorecardElement(
                    id=result.element_id_map[element.id],
                    name=element.name,
                    description=element.description,
                    parent_id=result.element_id_map.get(element.parent_id) if element.parent_id else None,
                    organization_id=new_organization_id,
                    element_type=element.element_type,
                    owner_user_id=None,
                    weight=element.weight,
                    order_index=element.order_index,
                )
            )
        db.add_all(new_rows)
        db.flush()
        logger.debug(f"🧬 [Replicator] Level {depth}: inserted {len(new_rows)} elements")

        next_level = []
        for element in level:
            for child in children_by_parent.get(element.id, []):
                if child.id not in result.element_id_map:
                    next_level.append(child)
        level = next_level
        depth += 1

    skipped = len(template_ids) - len(result.element_id_map)
    if skipped:
        logger.warning(f"⚠️ [Replicator] {skipped} template elements were unreachable from a root and not copied")

    template_kpis: List[Kpi] = (
        db.query(Kpi)
        .filter(Kpi.scorecard_element_id.in_(list(result.element_id_map.keys())))
        .all()
    )
    new_kpis = []
    for kpi in template_kpis:
        new_kpi = Kpi(
            id=uuid.uuid4(),
            scorecard_element_id=result.element_id_map[kpi.scorecard_element_id],
            **{name: getattr(kpi, name) for name in KPI_CONFIG_FIELDS},
        )
        result.kpi_id_map[kpi.id] = new_kpi.id
        new_kpis.append(new_kpi)
    if new_kpis:
        db.add_all(new_kpis)
        db.flush()

    logger.info(
        f"✅ [Replicator] Copied {result.elements_created} elements and {result.kpis_created} KPIs "
        f"into organization {new_organization_id}"
    )
    return result
