from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.database import get_db
from driving_school.models.admin import Admin
from driving_school.modules.auth.dependencies import get_current_admin
from driving_school.schemas.common import DataResponse, ListResponse, MessageResponse
from driving_school.schemas.payment import PaymentPlanCreate, PaymentPlanResponse, PaymentPlanUpdate
from driving_school.services.payment_service import payment_plan_service
from driving_school.utils.pagination import PaginationParams, pagination_params

router = APIRouter()


@router.get("", response_model=ListResponse[PaymentPlanResponse])
async def list_plans(
    params: PaginationParams = Depends(pagination_params),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    page = await payment_plan_service.list_plans(db, params)
    return ListResponse(
        count=len(page.items),
        data=[PaymentPlanResponse.model_validate(p) for p in page.items],
        pagination=page.meta(),
    )


@router.get("/{plan_id}", response_model=DataResponse[PaymentPlanResponse])
async def get_plan(
    plan_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    plan = await payment_plan_service.get_plan(db, plan_id)
    return DataResponse(data=PaymentPlanResponse.model_validate(plan))


@router.post("", response_model=DataResponse[PaymentPlanResponse], status_code=status.HTTP_201_CREATED)
async def create_plan(
    body: PaymentPlanCreate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    plan = await payment_plan_service.create_plan(db, body)
    return DataResponse(data=PaymentPlanResponse.model_validate(plan), message="Payment plan created successfully")


@router.put("/{plan_id}", response_model=DataResponse[PaymentPlanResponse])
async def update_plan(
    plan_id: str,
    body: PaymentPlanUpdate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    plan = await payment_plan_service.update_plan(db, plan_id, body)
    return DataResponse(data=PaymentPlanResponse.model_validate(plan), message="Payment plan updated successfully")


@router.delete("/{plan_id}", response_model=MessageResponse)
async def delete_plan(
    plan_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await payment_plan_service.delete_plan(db, plan_id)
    return MessageResponse(message="Payment plan deleted successfully")
