from __future__ import annotations

from typing import Protocol

from models import NormalizedProfile, ProfileType


class ProfileClassifierPort(Protocol):
    name: str

    def classify(self, profile: NormalizedProfile) -> ProfileType:
        ...
