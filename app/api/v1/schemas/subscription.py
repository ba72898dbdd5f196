from pydantic import BaseModel, Field


class ValidateFeatureIn(BaseModel):
    feature: str = Field(description="geo_locking, ip_restrictions, catchup_tv, vtt, 4k or multiple_channels")


class PlanOut(BaseModel):
    key: str
    name: str
    price: int
    channels: int
    features: list[str]


class ValidateFeatureOut(BaseModel):
    feature: str
    has_access: bool
    current_plan: PlanOut | None = None
    required_plan: str | None = Field(default=None, description="Lowest plan granting the feature")
