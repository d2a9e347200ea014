from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from driving_school.core.database import get_db
from driving_school.models.admin import Admin
from driving_school.models.candidate import CandidateStatus, LicenseType, Phase
from driving_school.modules.auth.dependencies import get_current_admin
from driving_school.schemas.candidate import (
    CandidateCreate,
    CandidateProgressUpdate,
    CandidateResponse,
    CandidateUpdate,
)
from driving_school.schemas.common import CountData, DataResponse, ListResponse, MessageResponse
from driving_school.services.candidate_service import candidate_service
from driving_school.utils.pagination import PaginationParams, pagination_params

router = APIRouter()


@router.get("", response_model=ListResponse[CandidateResponse])
async def list_candidates(
    license_type: Optional[LicenseType] = Query(None),
    status_filter: Optional[CandidateStatus] = Query(None, alias="status"),
    progress: Optional[Phase] = Query(None),
    search: Optional[str] = Query(None, description="Matches name, email or phone"),
    params: PaginationParams = Depends(pagination_params),
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """List candidates (deleted ones only with status=deleted)"""
    page = await candidate_service.list_candidates(
        db, params, license_type=license_type, status=status_filter, progress=progress, search=search
    )
    return ListResponse(
        count=len(page.items),
        data=[CandidateResponse.model_validate(c) for c in page.items],
        pagination=page.meta(),
    )


@router.get("/count", response_model=DataResponse[CountData])
async def count_candidates(
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    total = await candidate_service.count_candidates(db)
    return DataResponse(data=CountData(total=total))


@router.get("/{candidate_id}", response_model=DataResponse[CandidateResponse])
async def get_candidate(
    candidate_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Get a candidate with phase counters synced from completed lessons"""
    candidate = await candidate_service.get_candidate_with_progress(db, candidate_id)
    return DataResponse(data=CandidateResponse.model_validate(candidate))


@router.post("", response_model=DataResponse[CandidateResponse], status_code=status.HTTP_201_CREATED)
async def create_candidate(
    body: CandidateCreate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    candidate = await candidate_service.create_candidate(db, body)
    return DataResponse(data=CandidateResponse.model_validate(candidate), message="Candidate created successfully")


@router.put("/{candidate_id}", response_model=DataResponse[CandidateResponse])
async def update_candidate(
    candidate_id: str,
    body: CandidateUpdate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Partial update: only the fields sent are validated and changed"""
    candidate = await candidate_service.update_candidate(db, candidate_id, body)
    return DataResponse(data=CandidateResponse.model_validate(candidate), message="Candidate updated successfully")


@router.delete("/{candidate_id}", response_model=MessageResponse)
async def delete_candidate(
    candidate_id: str,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    await candidate_service.delete_candidate(db, candidate_id)
    return MessageResponse(message="Candidate deleted successfully")


@router.put("/{candidate_id}/progress", response_model=DataResponse[CandidateResponse])
async def update_progress(
    candidate_id: str,
    body: CandidateProgressUpdate,
    current_admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    candidate = await candidate_service.update_progress(db, candidate_id, body.progress)
    return DataResponse(data=CandidateResponse.model_validate(candidate), message="Progress updated successfully")
