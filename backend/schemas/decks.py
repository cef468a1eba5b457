from typing import Optional
from pydantic import BaseModel, Field, field_validator


class DeckCreateIn(BaseModel):
    title: str = Field(min_length=1, max_length=255)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, v):
        return (v or "").strip()


class CardSaveIn(BaseModel):
    # Missing fields are stored as empty strings, never NULL.
    question: Optional[str] = ""
    answer: Optional[str] = ""

    @field_validator("question", "answer", mode="after")
    @classmethod
    def _none_to_empty(cls, v: Optional[str]) -> str:
        return "" if v is None else v


class DeckOut(BaseModel):
    id: int
    title: str
    card_count: int


class CardOut(BaseModel):
    id: int
    deck_id: int
    question: str
    answer: str
