"""Pydantic models describing the catalog source payloads."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _scalar_to_str(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return str(value)
    return _blank_to_none(value)


class SourceBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AppPayload(SourceBaseModel):
    bundle_id: str = Field(alias="bundleId", min_length=1)
    name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    description: str | None = None
    category_id: str | None = Field(default=None, alias="categoryId")
    subcategory_id: str | None = Field(default=None, alias="subcategoryId")
    tags: list[str] | None = None
    screenshots: list[str] | None = None
    icon: str | None = None
    website: str | None = None
    price: str | None = None
    vendor: str | None = None
    license: str | None = None
    file_size: int | None = Field(default=None, alias="fileSize", ge=0)
    download_url: str | None = Field(default=None, alias="downloadUrl")
    download_count: int | None = Field(default=None, alias="downloadCount", ge=0)
    requirements: str | None = None
    release_date: datetime | None = Field(default=None, alias="releaseDate")
    last_scan_date: datetime | None = Field(default=None, alias="lastScanDate")

    _strip_bundle_id = field_validator("bundle_id", "name", mode="before")(_blank_to_none)
    _normalize_scalars = field_validator(
        "version", "category_id", "subcategory_id", "price", mode="before"
    )(_scalar_to_str)
    _normalize_optional = field_validator(
        "description",
        "icon",
        "website",
        "vendor",
        "license",
        "download_url",
        "requirements",
        "release_date",
        "last_scan_date",
        mode="before",
    )(_blank_to_none)

    @field_validator("tags", "screenshots", mode="before")
    @classmethod
    def _drop_blank_items(cls, value: object) -> object:
        if isinstance(value, list):
            items = cast(list[object], value)
            return [item.strip() for item in items if isinstance(item, str) and item.strip()]
        return value


class CatalogPage(SourceBaseModel):
    apps: list[AppPayload]
    page: int = 1
    total_pages: int = Field(default=1, alias="totalPages", ge=1)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, value: object) -> object:
        if isinstance(value, list):
            return {"apps": value}
        return value


class CategoryPayload(SourceBaseModel):
    id: str
    name: str = Field(min_length=1)
    slug: str | None = None
    description: str | None = None
    parent_id: str | None = None
    children: list[Mapping[str, object]] | None = None

    _normalize_ids = field_validator("id", "parent_id", mode="before")(_scalar_to_str)
    _normalize_text = field_validator("slug", "description", mode="before")(_blank_to_none)
