"""
Staff management routes.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..db import StaffMember, StaffCreate, StaffUpdate
from ..dependencies import get_db, require_admin
from ..processor.staff import create_staff, update_staff

router = APIRouter(prefix="/api/staff", dependencies=[Depends(require_admin)])


@router.get("", response_model=List[StaffMember])
async def list_staff():
    return await get_db().get_staff_members()


@router.post("", response_model=StaffMember, status_code=201)
async def create_staff_member(data: StaffCreate):
    try:
        return await create_staff(get_db(), data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{staff_id}", response_model=StaffMember)
async def get_staff_member(staff_id: str):
    member = await get_db().get_staff_member(staff_id)
    if not member:
        raise HTTPException(status_code=404, detail="Staff member not found")
    return member


@router.put("/{staff_id}", response_model=StaffMember)
async def update_staff_member(staff_id: str, data: StaffUpdate):
    try:
        member = await update_staff(get_db(), staff_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not member:
        raise HTTPException(status_code=404, detail="Staff member not found")
    return member


@router.delete("/{staff_id}")
async def delete_staff_member(staff_id: str):
    if not await get_db().delete_staff_member(staff_id):
        raise HTTPException(status_code=404, detail="Staff member not found")
    return {"success": True}
