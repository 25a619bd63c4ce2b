from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from scorecard.models.kpi import AggregationType


@dataclass(frozen=True)
class ValueSample:
    period_date: date
    value: Optional[float]


def aggregate(aggregation_type: AggregationType, samples: Sequence[ValueSample]) -> Optional[float]:
    """Combine descendant values; null samples never contribute.

    Returns None when nothing contributes, for every strategy. ``LAST_VALUE``
    takes the sample with the latest period; among equal periods the one that
    comes last in ``samples`` wins.
    """
    contributing = [s for s in samples if s.value is not None]
    if not contributing:
        return None

    if aggregation_type == AggregationType.SUM:
        return float(sum(s.value for s in contributing))

    if aggregation_type == AggregationType.AVERAGE:
        return sum(s.value for s in contributing) / len(contributing)

    if aggregation_type == AggregationType.LAST_VALUE:
        latest = contributing[0]
        for sample in contributing[1:]:
            if sample.period_date >= latest.period_date:
                latest = sample
        return float(latest.value)

    return None
