from pydantic import BaseModel, Field


class PageView(BaseModel):
    page_number: int = Field(ge=1)
    total_pages: int = Field(ge=1)
    scale: float
    # размеры страницы в пунктах PDF, уже умноженные на scale
    width: float
    height: float
    text: str = ""
