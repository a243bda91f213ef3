# Namespace for pipeline steps
from .admit_quota import AdmitQuota  # noqa: F401
from .fetch_records import FetchRecords  # noqa: F401
from .extract_candidates import ExtractCandidates  # noqa: F401
from .filter_existing import FilterExisting  # noqa: F401
from .enrich_profiles import EnrichProfiles  # noqa: F401
from .reconcile_contacts import ReconcileContacts  # noqa: F401
from .advance_records import AdvanceRecords  # noqa: F401
from .commit_quota import CommitQuota  # noqa: F401
