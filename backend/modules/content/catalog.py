"""
Content library catalog.

Describes, per library, which table backs it and which columns play the
title, product, category, language and counter roles. The repository
and service are written once against these descriptions.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel

from .models import (
    ContentKind,
    Document,
    DocumentCreate,
    DocumentUpdate,
    MarketingAsset,
    MarketingAssetCreate,
    MarketingAssetUpdate,
    SoftwareRelease,
    SoftwareReleaseCreate,
    SoftwareReleaseUpdate,
    SortField,
    TrainingMaterial,
    TrainingMaterialCreate,
    TrainingMaterialUpdate,
)


@dataclass(frozen=True)
class ContentSpec:
    """Table and column roles for one content library."""

    kind: ContentKind
    table: str
    model: type[BaseModel]
    create_model: type[BaseModel]
    update_model: type[BaseModel]
    resource_type: str
    title_field: str
    product_field: str
    category_field: str
    counter_field: str
    search_fields: tuple[str, ...]
    language_field: Optional[str] = None
    version_field: Optional[str] = None
    size_field: Optional[str] = None
    published_status: str = "published"

    def sort_column(self, sort_field: SortField) -> Optional[str]:
        """Column backing a sort field, or None if this library lacks it."""
        return {
            SortField.TITLE: self.title_field,
            SortField.PRODUCT: self.product_field,
            SortField.CATEGORY: self.category_field,
            SortField.VERSION: self.version_field,
            SortField.SIZE: self.size_field,
            SortField.UPDATED: "updated_at",
        }[sort_field]


CATALOG: dict[ContentKind, ContentSpec] = {
    ContentKind.DOCUMENTS: ContentSpec(
        kind=ContentKind.DOCUMENTS,
        table="documentation",
        model=Document,
        create_model=DocumentCreate,
        update_model=DocumentUpdate,
        resource_type="document",
        title_field="title",
        product_field="product",
        category_field="category",
        counter_field="downloads",
        search_fields=("title", "product"),
        language_field="language",
        version_field="version",
        size_field="file_size",
    ),
    ContentKind.TRAINING: ContentSpec(
        kind=ContentKind.TRAINING,
        table="training_materials",
        model=TrainingMaterial,
        create_model=TrainingMaterialCreate,
        update_model=TrainingMaterialUpdate,
        resource_type="training",
        title_field="title",
        product_field="product",
        category_field="type",
        counter_field="views",
        search_fields=("title", "product", "description"),
    ),
    ContentKind.MARKETING: ContentSpec(
        kind=ContentKind.MARKETING,
        table="marketing_assets",
        model=MarketingAsset,
        create_model=MarketingAssetCreate,
        update_model=MarketingAssetUpdate,
        resource_type="marketing_asset",
        title_field="name",
        product_field="product",
        category_field="type",
        counter_field="downloads",
        search_fields=("name", "product", "description"),
        language_field="language",
        size_field="size",
    ),
    ContentKind.SOFTWARE: ContentSpec(
        kind=ContentKind.SOFTWARE,
        table="software_releases",
        model=SoftwareRelease,
        create_model=SoftwareReleaseCreate,
        update_model=SoftwareReleaseUpdate,
        resource_type="software_release",
        title_field="name",
        product_field="product_name",
        category_field="release_type",
        counter_field="download_count",
        search_fields=("name", "version", "product_name", "description"),
        version_field="version",
        size_field="file_size",
    ),
}


def get_spec(kind: ContentKind) -> ContentSpec:
    return CATALOG[kind]
