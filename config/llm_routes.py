from __future__ import annotations

import os


# Central routing for LLM use-cases. Edit here to change per-operation defaults.
# You can also override per-route model via env vars for quick testing.
#
# Keys are use_case identifiers consumed by services/llm_client.py
ROUTES: dict[str, dict] = {
    # Person vs company classification of enriched LinkedIn profiles
    "profile_classification": {
        "provider": "openai",
        "model": os.getenv("OPENAI_MODEL_CLASSIFIER"),  # falls back to global OPENAI_MODEL
        "temperature": 0,
        "max_tokens": 10,
        # Logical operation name for logging (not a vendor API name)
        "operation": "profile_classification",
    },
}
