from .source_record import SourceRecord
from .profile_candidate import ProfileCandidate
from .enriched_profile import EnrichedProfile, NormalizedProfile
from .weekly_quota import AdmissionResult, WeeklyQuota
from .reconcile_outcome import ProfileType, ReconcileAction, ReconcileOutcome

__all__ = [
    "SourceRecord",
    "ProfileCandidate",
    "EnrichedProfile",
    "NormalizedProfile",
    "AdmissionResult",
    "WeeklyQuota",
    "ProfileType",
    "ReconcileAction",
    "ReconcileOutcome",
]
