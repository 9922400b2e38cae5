"""Identity verification scoring.

``VerificationProvider`` is the seam for a real biometric/OCR vendor. The
randomized provider stands in until one is integrated and is the default.
"""

import math
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class VerificationScores:
    face_similarity: float
    ocr_confidence: float
    liveness: float


class VerificationProvider(ABC):
    @abstractmethod
    def score(self, front: bytes, back: bytes, face: bytes) -> VerificationScores:
        """Score an ID card (front/back) and a selfie."""


class RandomizedVerificationProvider(VerificationProvider):
    """Placeholder provider producing plausible passing-range scores."""

    FACE_RANGE = (85.0, 100.0)
    OCR_RANGE = (90.0, 100.0)
    LIVENESS_RANGE = (88.0, 100.0)

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def score(self, front: bytes, back: bytes, face: bytes) -> VerificationScores:
        return VerificationScores(
            face_similarity=round(self.rng.uniform(*self.FACE_RANGE), 2),
            ocr_confidence=round(self.rng.uniform(*self.OCR_RANGE), 2),
            liveness=round(self.rng.uniform(*self.LIVENESS_RANGE), 2),
        )


def composite_score(scores: VerificationScores) -> int:
    """Floor of ``0.5*face + 0.3*ocr + 0.2*liveness``, weighted in tenths."""
    weighted = 5 * scores.face_similarity + 3 * scores.ocr_confidence + 2 * scores.liveness
    return math.floor(weighted / 10)


def fraud_flags(scores: VerificationScores) -> list[str]:
    flags = []
    if scores.face_similarity < 90:
        flags.append("low_face_match")
    if scores.ocr_confidence < 92:
        flags.append("blurry_document")
    return flags


def get_verification_provider() -> VerificationProvider:
    return RandomizedVerificationProvider()
