from fastapi import APIRouter, Depends

from app.api.v1.dependency import CurrentTenant, get_channel_service
from app.api.v1.schemas.base import ApiOut
from app.api.v1.schemas.subscription import PlanOut, ValidateFeatureIn, ValidateFeatureOut
from app.domain.live.channel.channel_domain import ChannelService

router = APIRouter(prefix="/subscription")


@router.post("/validate_feature")
async def validate_feature(
    body: ValidateFeatureIn,
    tenant: CurrentTenant,
    service: ChannelService = Depends(get_channel_service),
) -> ApiOut[ValidateFeatureOut]:
    """Whether the tenant's current plan grants a feature."""
    result = service.validate_feature(tenant, body.feature)

    current_plan = None
    if result.current_plan:
        current_plan = PlanOut(
            key=result.current_plan,
            name=result.plan_name or result.current_plan,
            price=result.plan_price or 0,
            channels=result.plan_channels or 0,
            features=result.plan_features,
        )

    return ApiOut[ValidateFeatureOut](
        results=ValidateFeatureOut(
            feature=result.feature,
            has_access=result.has_access,
            current_plan=current_plan,
            required_plan=result.required_plan,
        )
    )
