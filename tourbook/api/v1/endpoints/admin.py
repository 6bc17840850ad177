from typing import List

from fastapi import APIRouter, Query, status

from tourbook.api.v1.schemas.admin_schemas import AdminCreate, AdminStats
from tourbook.api.v1.schemas.auth_schemas import UserOut
from tourbook.deps import SessionDep
from tourbook.services.admin_service import AdminService


router = APIRouter()


@router.get("/", response_model=List[UserOut])
async def list_admins(
    sess: SessionDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    service = AdminService(sess)
    return [UserOut.model_validate(u) for u in await service.list_admins(skip=skip, limit=limit)]


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_admin(payload: AdminCreate, sess: SessionDep):
    service = AdminService(sess)
    user = await service.create_admin(name=payload.name, email=payload.email, password=payload.password)
    await sess.commit()
    return UserOut.model_validate(user)


@router.get("/stats", response_model=AdminStats)
async def get_stats(sess: SessionDep):
    """Dashboard counters"""
    service = AdminService(sess)
    return AdminStats(**await service.get_stats())
