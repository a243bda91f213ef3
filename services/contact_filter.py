from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from models import ProfileCandidate
from ports import ContactStorePort


logger = logging.getLogger(__name__)


@dataclass
class Partition:
    existing: List[Tuple[ProfileCandidate, str]] = field(default_factory=list)
    new: List[ProfileCandidate] = field(default_factory=list)
    lookup_errors: int = 0


class ExistingContactFilter:
    """Splits candidates into those already present as CRM contacts and new ones.

    A failed lookup counts the candidate as new: a possible duplicate contact is
    preferred over halting the run.
    """

    def __init__(self, contacts: ContactStorePort, lookup_delay_seconds: float = 0.1) -> None:
        self.contacts = contacts
        self.lookup_delay_seconds = lookup_delay_seconds

    def partition(self, candidates: Sequence[ProfileCandidate]) -> Partition:
        result = Partition()
        for idx, candidate in enumerate(candidates):
            if idx and self.lookup_delay_seconds > 0:
                time.sleep(self.lookup_delay_seconds)
            try:
                contact = self.contacts.find_contact_by_profile_url(candidate.url)
            except Exception as e:
                result.lookup_errors += 1
                logger.warning(
                    f"Contact lookup failed for {candidate.url}, treating as new",
                    extra={"step": "filter_existing", "status": "error", "error": str(e)},
                )
                result.new.append(candidate)
                continue
            if contact and contact.get("id"):
                logger.info(f"{candidate.url} already exists as contact {contact['id']}")
                result.existing.append((candidate, str(contact["id"])))
            else:
                result.new.append(candidate)

        logger.info(
            f"Checked {len(candidates)} URLs: {len(result.new)} new, {len(result.existing)} existing",
            extra={"step": "filter_existing", "status": "ok"},
        )
        return result
