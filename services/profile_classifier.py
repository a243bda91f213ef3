from __future__ import annotations

import logging
import re
from typing import Optional

from config.settings import Settings, get_settings
from models import NormalizedProfile, ProfileType
from ports import LLMClientPort, ProfileClassifierPort


logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a classifier. Analyze if this LinkedIn profile belongs to a person or a company. "
    'Respond with only "person" or "company".'
)

LEGAL_ENTITY_KEYWORDS = ("inc", "ltd", "corp", "corporation", "company", "llc", "gmbh", "s.a.", "s.l.", "co.", "group")

_KEYWORD_RE = re.compile(
    r"(?<![a-z0-9])(?:" + "|".join(re.escape(k) for k in LEGAL_ENTITY_KEYWORDS) + r")(?![a-z0-9])",
    re.IGNORECASE,
)


class RuleBasedProfileClassifier:
    """Keyword heuristics; biased towards "person", which dominates post authors."""

    name = "rules"

    def classify(self, profile: NormalizedProfile) -> ProfileType:
        if not profile.summary_text():
            return "unknown"
        text = f"{profile.position} {profile.company}"
        if _KEYWORD_RE.search(text):
            return "company"
        # Distinct position/company imply a person; ambiguous profiles default to person as well
        return "person"


class LLMProfileClassifier:
    name = "llm"

    def __init__(self, llm: LLMClientPort) -> None:
        self.llm = llm

    def classify(self, profile: NormalizedProfile) -> ProfileType:
        profile_text = profile.summary_text()
        if not profile_text:
            return "unknown"
        user_message = f"Profile info: {profile_text}"
        try:
            resp = self.llm.chat(
                use_case="profile_classification",
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": user_message},
                ],
                prompt_name="profile_classification",
                prompt_text=SYSTEM_PROMPT,
                extras={"profile_url": profile.profile_url} if profile.profile_url else None,
            )
            content = resp.choices[0].message.content or ""
        except Exception as e:
            logger.warning(f"LLM classification failed for {profile.name or profile.profile_url}: {e}")
            return "unknown"

        answer = content.strip().strip('."\'').lower()
        if answer.startswith("person"):
            return "person"
        if answer.startswith("company"):
            return "company"
        logger.warning(f"Unexpected classifier answer {content!r}")
        return "unknown"


def build_classifier(settings: Optional[Settings] = None, llm: Optional[LLMClientPort] = None) -> ProfileClassifierPort:
    """LLM-backed when a client or an OpenAI key is available, rule-based otherwise."""
    settings = settings or get_settings()
    if llm is not None:
        return LLMProfileClassifier(llm)
    if settings.openai_api_key:
        from services.llm_client import LLMClient

        return LLMProfileClassifier(LLMClient(settings))
    logger.info("OPENAI_API_KEY not set, using rule-based profile classification")
    return RuleBasedProfileClassifier()
