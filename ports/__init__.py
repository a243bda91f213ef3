from .llm import LLMClientPort
from .crm import ContactStorePort, PartialFetchError, RecordStorePort
from .enrichment import EnrichmentPort
from .classifier import ProfileClassifierPort

__all__ = [
    "LLMClientPort",
    "RecordStorePort",
    "ContactStorePort",
    "PartialFetchError",
    "EnrichmentPort",
    "ProfileClassifierPort",
]
