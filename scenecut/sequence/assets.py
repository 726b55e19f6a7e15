"""
scenecut.sequence.assets - Character, location and item references.

Assets are owned outside the sequence; scenes only hold their ids, and an
id that no longer resolves is simply skipped.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field, field_validator

ASSET_TYPES = ("character", "location", "item")


class Asset(BaseModel):
    """A reusable reference (character sheet, location plate, prop)."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    type: str = "character"
    name: str
    description: str = ""
    trigger_word: str = ""
    image: str | None = None
    aspect_ratio: str = "16:9"

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if v not in ASSET_TYPES:
            raise ValueError(f"type must be one of: {ASSET_TYPES}")
        return v


class AssetLibrary(BaseModel):
    """The project's asset collection."""

    assets: list[Asset] = Field(default_factory=list)

    def add(self, asset: Asset) -> Asset:
        self.assets.append(asset)
        return asset

    def get(self, asset_id: str) -> Asset | None:
        return next((a for a in self.assets if a.id == asset_id), None)

    def find(self, name_or_id: str) -> Asset | None:
        """Look up by id first, then by case-insensitive name."""
        asset = self.get(name_or_id)
        if asset:
            return asset
        lowered = name_or_id.lower()
        return next((a for a in self.assets if a.name.lower() == lowered), None)

    def remove(self, asset_id: str) -> Asset | None:
        asset = self.get(asset_id)
        if asset:
            self.assets.remove(asset)
        return asset

    def resolve(self, asset_ids: list[str]) -> list[Asset]:
        """Resolve ids in order, dropping dangling ones."""
        resolved = []
        for asset_id in asset_ids:
            asset = self.get(asset_id)
            if asset is not None:
                resolved.append(asset)
        return resolved

    def apply_aspect_ratio(self, ratio: str) -> None:
        for asset in self.assets:
            asset.aspect_ratio = ratio

    def describe(self, asset_ids: list[str]) -> str:
        """One-line context string for prompt assistance."""
        parts = []
        for asset in self.resolve(asset_ids):
            trigger = f" - trigger: {asset.trigger_word}" if asset.trigger_word else ""
            parts.append(f"{asset.name} ({asset.description}{trigger})")
        return "; ".join(parts)
