"""
Pydantic models describing response payloads.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ObjectEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    size: int
    last_modified: Optional[str] = Field(default=None, alias="lastModified")
    etag: str


class BucketListing(BaseModel):
    bucket: str
    prefix: str
    objects: List[ObjectEntry]


class ErrorResponse(BaseModel):
    error: str


class HealthStatus(BaseModel):
    status: str
