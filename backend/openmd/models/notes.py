from typing import Optional, Union

from pydantic import BaseModel, Field

# opaque to the service; round-tripped as given
MetadataValue = Union[bool, int, float, str]


class NoteCreate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = Field(default=None, max_length=100_000)
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = Field(default=None, max_length=100_000)
    metadata: Optional[dict[str, MetadataValue]] = None


class NoteOut(BaseModel):
    id: int
    title: str
    content: str
    metadata: dict[str, MetadataValue]
    createdAt: str
    updatedAt: str
    ownerId: Optional[str] = None
    url: Optional[str] = None
