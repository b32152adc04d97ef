from pydantic import Field

from paraphraser.schemas.common import CamelModel


class ParaphraseResponse(CamelModel):
    result: str
    ai_score: int | None = Field(default=None, ge=0, le=100)
    refined: bool = False
