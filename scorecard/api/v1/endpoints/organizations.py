from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from scorecard.api.deps import get_db
from scorecard.api.errors import to_http_exception
from scorecard.core.exceptions import ScorecardError
from scorecard.rollup.organizations import OrganizationService
from scorecard.schemas.organization import OrganizationCreate, OrganizationRead

router = APIRouter()


@router.post("/", response_model=OrganizationRead, status_code=status.HTTP_201_CREATED)
def create_organization(payload: OrganizationCreate, db: Session = Depends(get_db)):
    try:
        organization = OrganizationService(db).create_organization(
            name=payload.name,
            description=payload.description,
            parent_id=payload.parent_id,
            template_organization_id=payload.template_organization_id,
            template_from_dataset_field=payload.template_from_dataset_field,
        )
    except ScorecardError as e:
        raise to_http_exception(e)
    return OrganizationRead.model_validate(organization)
