import logging
from typing import Optional

from sqlalchemy.orm import Session

from scorecard.core.exceptions import NotFoundError
from scorecard.core.locks import organization_lock
from scorecard.core.metrics import replications_completed_total
from scorecard.models import Organization
from .replicator import ReplicationResult, replicate_scorecard_structure

logger = logging.getLogger(__name__)


class OrganizationService:
    def __init__(self, db: Session):
        self.db = db

    def get(self, organization_id) -> Organization:
        organization = self.db.get(Organization, organization_id)
        if not organization:
            raise NotFoundError(f"Organization {organization_id} not found")
        return organization

    def create_organization(
        self,
        name: str,
        description: Optional[str] = None,
        parent_id=None,
        template_organization_id=None,
        template_from_dataset_field: Optional[str] = None,
    ) -> Organization:
        """Create an organization, copying a template's scorecard in the same transaction."""
        if parent_id is not None:
            self.get(parent_id)
        if template_organization_id is not None:
            self.get(template_organization_id)

        organization = Organization(
            name=name,
            description=description,
            parent_id=parent_id,
            template_from_dataset_field=template_from_dataset_field,
        )
        try:
            self.db.add(organization)
            self.db.flush()
            if template_organization_id is not None:
                with organization_lock(organization.id):
                    replicate_scorecard_structure(self.db, template_organization_id, organization.id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"❌ [Organizations] Failed to create organization '{name}'")
            raise

        if template_organization_id is not None:
            replications_completed_total.inc()
        logger.info(f"🏢 [Organizations] Created organization {organization.id} '{name}'")
        self.db.refresh(organization)
        return organization

    def replicate_from_template(self, organization_id, template_organization_id) -> ReplicationResult:
        """Copy a template scorecard into an existing organization; all or nothing."""
        self.get(organization_id)
        self.get(template_organization_id)
        with organization_lock(organization_id):
            try:
                result = replicate_scorecard_structure(self.db, template_organization_id, organization_id)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        replications_completed_total.inc()
        return result
