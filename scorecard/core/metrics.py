from prometheus_client import Counter


kpi_values_scored_total = Counter(
    "scorecard_kpi_values_scored_total",
    "Total KPI values written through the scoring engine",
    ["source"],
)

rollups_computed_total = Counter(
    "scorecard_rollups_computed_total",
    "Total rollup KPI values computed",
)

replications_completed_total = Counter(
    "scorecard_replications_completed_total",
    "Total scorecard structures replicated from a template organization",
)

scheduled_import_scans_total = Counter(
    "scorecard_scheduled_import_scans_total",
    "Total scheduled-import scan cycles",
)

scheduled_imports_executed_total = Counter(
    "scorecard_scheduled_imports_executed_total",
    "Total due scheduled imports handed to an executor, by outcome (success or queued)",
    ["status"],
)

scheduled_imports_failed_total = Counter(
    "scorecard_scheduled_imports_failed_total",
    "Total scheduled imports whose executor failed",
)
