from typing import Literal

from pydantic import Field

from paraphraser.schemas.common import CamelModel


class DetectResponse(CamelModel):
    ai_score: int = Field(ge=0, le=100)
    human_score: int = Field(ge=0, le=100)
    confidence: Literal["low", "medium", "high"]
    detected_patterns: list[str] = Field(default_factory=list, max_length=5)
    verdict: Literal["AI-Generated", "Likely AI", "Mixed", "Likely Human", "Human-Written"]
