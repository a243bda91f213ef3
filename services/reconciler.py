from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from models import EnrichedProfile, ProfileCandidate, ReconcileOutcome
from ports import ContactStorePort, ProfileClassifierPort
from services.mapping import to_contact_properties


logger = logging.getLogger(__name__)


class ContactReconciler:
    """Creates or updates one CRM contact per candidate and links it to its records.

    Outcomes per candidate:
      existing contact  -> updated when a profile is available, otherwise linked; then associated
      no profile        -> skipped ("no_profile")
      company profile   -> skipped ("company")
      person, no name   -> skipped ("no_name")
      person with name  -> created, then associated
    Any exception ends the candidate as "errored"; the caller moves on.
    """

    def __init__(
        self,
        contacts: ContactStorePort,
        classifier: ProfileClassifierPort,
        profile_property: str = "linkedin_profile_link",
    ) -> None:
        self.contacts = contacts
        self.classifier = classifier
        self.profile_property = profile_property

    def _associate(self, candidate: ProfileCandidate, contact_id: str) -> Tuple[List[str], List[str]]:
        associated: List[str] = []
        failed: List[str] = []
        for record_id in candidate.record_ids:
            try:
                self.contacts.associate_contact(record_id, contact_id)
                associated.append(record_id)
            except Exception as e:
                failed.append(record_id)
                logger.error(
                    f"Association failed: deal {record_id} <-> contact {contact_id}",
                    extra={"step": "reconcile", "status": "error", "record_id": record_id, "error": str(e)},
                )
        return associated, failed

    def reconcile(
        self,
        candidate: ProfileCandidate,
        enriched: Optional[EnrichedProfile],
        existing_contact_id: Optional[str] = None,
    ) -> ReconcileOutcome:
        try:
            return self._reconcile(candidate, enriched, existing_contact_id)
        except Exception as e:
            logger.exception(
                f"Reconciliation failed for {candidate.url}",
                extra={"step": "reconcile", "status": "error", "error": str(e)},
            )
            return ReconcileOutcome(url=candidate.url, action="errored", reason=str(e))

    def _reconcile(
        self,
        candidate: ProfileCandidate,
        enriched: Optional[EnrichedProfile],
        existing_contact_id: Optional[str],
    ) -> ReconcileOutcome:
        if existing_contact_id:
            action = "linked"
            if enriched is not None:
                props = to_contact_properties(enriched.normalized, candidate.url, self.profile_property)
                self.contacts.update_contact(existing_contact_id, props)
                logger.info(f"Updated existing contact {existing_contact_id} for {candidate.url}")
                action = "updated"
            associated, failed = self._associate(candidate, existing_contact_id)
            return ReconcileOutcome(
                url=candidate.url,
                action=action,
                contact_id=existing_contact_id,
                associated_record_ids=associated,
                failed_record_ids=failed,
            )

        if enriched is None:
            logger.info(f"Skipping {candidate.url}: enrichment returned no profile")
            return ReconcileOutcome(url=candidate.url, action="skipped", reason="no_profile")

        profile = enriched.normalized
        profile_type = self.classifier.classify(profile)
        if profile_type == "company":
            logger.info(f"Skipping company profile {profile.name or candidate.url}")
            return ReconcileOutcome(url=candidate.url, action="skipped", reason="company", profile_type=profile_type)

        if not profile.first_name:
            logger.warning(
                f"Skipping {candidate.url}: no usable name "
                f"(experience={enriched.experience_count}, education={enriched.education_count}, "
                f"fields={sorted(enriched.raw.keys())})"
            )
            return ReconcileOutcome(url=candidate.url, action="skipped", reason="no_name", profile_type=profile_type)

        props = to_contact_properties(profile, candidate.url, self.profile_property)
        created = self.contacts.create_contact(props)
        contact_id = str(created.get("id") or "")
        if not contact_id:
            raise RuntimeError(f"Contact create for {candidate.url} returned no id")
        logger.info(f"Created contact {contact_id} for {profile.name}")

        associated, failed = self._associate(candidate, contact_id)
        return ReconcileOutcome(
            url=candidate.url,
            action="created",
            contact_id=contact_id,
            associated_record_ids=associated,
            failed_record_ids=failed,
            profile_type=profile_type,
        )
