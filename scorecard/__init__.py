"""DeltaOne scorecard backend: KPI scoring, formulas, hierarchy rollups and scheduled imports."""
