"""Feature flag schemas."""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

FLAG_KEY_PATTERN = r"^[a-z_]+$"


class FeatureFlagBase(BaseModel):
    """Fields shared by flag definitions."""

    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    description: Optional[str] = Field(None, description="What the flag gates")
    default_enabled: bool = Field(
        False, description="Fallback value when no override or rollout applies"
    )
    enabled_for_all: bool = Field(
        False, description="Force the flag on for every organization"
    )
    percentage: Optional[int] = Field(
        None, ge=0, le=100, description="Deterministic rollout percentage (0-100)"
    )


class FeatureFlagCreate(FeatureFlagBase):
    """Schema for creating a flag definition."""

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field(
        ...,
        max_length=100,
        pattern=FLAG_KEY_PATTERN,
        description="Stable identifier (lowercase letters and underscores)",
    )
    default_enabled: bool = Field(False, alias="defaultEnabled")
    enabled_for_all: bool = Field(False, alias="enabledForAll")


class FeatureFlagUpdate(BaseModel):
    """Partial update of a flag definition.

    The key cannot be renamed. Unknown fields are rejected, so a request
    trying to change it fails validation.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    default_enabled: Optional[bool] = Field(None, alias="defaultEnabled")
    enabled_for_all: Optional[bool] = Field(None, alias="enabledForAll")
    percentage: Optional[int] = Field(None, ge=0, le=100)

    @field_validator("name", "default_enabled", "enabled_for_all")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        """Reject explicit nulls; these columns always hold a value.

        Raises:
            ValueError: If the field is set to null
        """
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class FeatureFlag(FeatureFlagBase):
    """Flag definition as stored."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    key: str
    created_at: datetime
    modified_at: datetime


class FeatureFlagWithCount(FeatureFlag):
    """Flag definition with the number of organization overrides."""

    organization_override_count: int = 0


class OrganizationFeatureFlagUpsert(BaseModel):
    """Body for setting an organization override."""

    model_config = ConfigDict(populate_by_name=True)

    feature_flag_key: str = Field(..., alias="featureFlagKey", min_length=1)
    enabled: bool
    metadata: Optional[Dict[str, Any]] = None


class OrganizationFeatureFlag(BaseModel):
    """Organization override row."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    feature_flag_id: UUID
    enabled: bool
    metadata: Optional[Dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("flag_metadata", "metadata")
    )
    created_at: datetime
    modified_at: datetime


class FeatureFlagWithOverride(FeatureFlag):
    """Flag definition together with one organization's override (if any)."""

    organization_override: Optional[OrganizationFeatureFlag] = None
