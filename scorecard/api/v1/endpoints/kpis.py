from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from scorecard.api.deps import get_db
from scorecard.api.errors import to_http_exception
from scorecard.core.exceptions import ScorecardError
from scorecard.formulas.service import FormulaService
from scorecard.rollup.service import RollupService
from scorecard.schemas.kpi import (
    KpiRead,
    KpiReferenceRead,
    KpiValueCreate,
    KpiValueRead,
    ResolvedFormulaRead,
    RollupResultRead,
    RollupToggle,
)
from scorecard.scoring.service import KpiValueService

router = APIRouter()


@router.post("/{kpi_id}/values", response_model=KpiValueRead)
def record_manual_value(kpi_id: UUID, payload: KpiValueCreate, db: Session = Depends(get_db)):
    service = KpiValueService(db)
    try:
        kpi = service.get_kpi(kpi_id)
        if kpi.rollup_enabled or kpi.calculation_equation:
            raise HTTPException(status_code=409, detail="KPI value is computed, not entered manually")
        row = service.record_manual_value(
            kpi_id,
            payload.period_date,
            actual_value=payload.actual_value,
            target_value=payload.target_value,
            threshold_red=payload.threshold_red,
            threshold_yellow=payload.threshold_yellow,
            note=payload.note,
            updated_by_user_id=payload.updated_by_user_id,
        )
    except ScorecardError as e:
        raise to_http_exception(e)
    return KpiValueRead.model_validate(row)


@router.get("/{kpi_id}/formula", response_model=ResolvedFormulaRead)
def preview_formula(kpi_id: UUID, period_date: date = Query(...), db: Session = Depends(get_db)):
    try:
        resolved = FormulaService(db).resolve(kpi_id, period_date)
    except ScorecardError as e:
        raise to_http_exception(e)
    return ResolvedFormulaRead(
        equation=resolved.equation,
        expression=resolved.expression,
        references=[
            KpiReferenceRead(identifier=r.identifier, is_id=r.is_id, original_match=r.original_match)
            for r in resolved.references
        ],
        values=resolved.values,
        unresolved=resolved.unresolved,
    )


@router.post("/{kpi_id}/rollup", response_model=RollupResultRead)
def compute_rollup(kpi_id: UUID, period_date: date = Query(...), db: Session = Depends(get_db)):
    try:
        result = RollupService(db).compute(kpi_id, period_date)
    except ScorecardError as e:
        raise to_http_exception(e)
    return RollupResultRead(
        kpi_id=result.kpi_id,
        period_date=result.period_date,
        value=result.value,
        descendant_count=result.descendant_count,
        contributing_kpis=result.contributing_kpis,
        kpi_value=KpiValueRead.model_validate(result.kpi_value) if result.kpi_value else None,
    )


@router.patch("/{kpi_id}/rollup", response_model=KpiRead)
def toggle_rollup(kpi_id: UUID, payload: RollupToggle, db: Session = Depends(get_db)):
    try:
        kpi = RollupService(db).set_rollup_enabled(kpi_id, payload.rollup_enabled)
    except ScorecardError as e:
        raise to_http_exception(e)
    return KpiRead.model_validate(kpi)
