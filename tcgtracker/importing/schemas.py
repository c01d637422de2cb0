"""
Request/response models for the import endpoints.

Fields are snake_case in Python and camelCase on the wire.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PreviewStatus = Literal["New", "Update", "Invalid", "Info"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImportRequestPayload(CamelModel):
    """JSON body accepted by dry-run and apply."""

    source: str = Field(default="", description="Source name or alias", examples=["lorcana"])
    set: str | None = Field(default=None, description="Set code to import", examples=["TFC"])
    limit: int | None = Field(default=None, description="Maximum records to consider")


class ImportPreviewRow(CamelModel):
    """One line of the dry-run report."""

    external_id: str
    name: str
    game: str
    set: str
    rarity: str | None = None
    printing_key: str | None = None
    image_url: str | None = None
    price: float | None = None
    status: PreviewStatus
    messages: list[str] = Field(default_factory=list)


class ImportPreviewSummary(CamelModel):
    new: int = 0
    update: int = 0
    duplicate: int = 0
    invalid: int = 0


class ImportPreviewResponse(CamelModel):
    """Response for POST /import/dry-run."""

    summary: ImportPreviewSummary
    rows: list[ImportPreviewRow] = Field(default_factory=list)


class ImportApplyResponse(CamelModel):
    """Response for POST /import/apply."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    invalid: int = 0


class ImportSetOption(CamelModel):
    code: str
    name: str


class ImportSourceOption(CamelModel):
    key: str = Field(..., description="Canonical source name")
    importer_key: str = Field(..., description="Registry key of the importer")
    display_name: str
    games: list[str] = Field(default_factory=list)
    sets: list[ImportSetOption] = Field(default_factory=list)


class ImportOptionsResponse(CamelModel):
    """Response for GET /import/options."""

    sources: list[ImportSourceOption] = Field(default_factory=list)
