"""Organization-hierarchy features: descendant discovery, rollup aggregation and
scorecard replication from template organizations."""

from .aggregator import ValueSample, aggregate
from .hierarchy import collect_descendants, get_descendant_organization_ids
from .replicator import ReplicationResult, replicate_scorecard_structure
from .service import RollupResult, RollupService
from .organizations import OrganizationService
