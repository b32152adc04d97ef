from paraphraser.schemas.common import CamelModel


class ParseFileResponse(CamelModel):
    text: str
    page_count: int
    word_count: int
