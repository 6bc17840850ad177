from typing import List

from fastapi import APIRouter, File, UploadFile
from starlette.concurrency import run_in_threadpool

from tourbook.api.v1.schemas.admin_schemas import UploadOut, MultiUploadOut
from tourbook import storage


router = APIRouter()


def _out(key: str) -> UploadOut:
    return UploadOut(key=key, url=storage.presigned(key))


@router.post("/image", response_model=UploadOut)
async def upload_image(file: UploadFile = File(...)):
    """Store a tour image (jpeg, png, gif, webp)"""
    key = await run_in_threadpool(storage.upload_image, file)
    return _out(key)


@router.post("/multiple", response_model=MultiUploadOut)
async def upload_images(files: List[UploadFile] = File(...)):
    """Store up to ten tour images in one request"""
    keys = await run_in_threadpool(storage.upload_images, files)
    return MultiUploadOut(files=[_out(key) for key in keys])


@router.post("/gpx", response_model=UploadOut)
async def upload_gpx(file: UploadFile = File(...)):
    """Store a GPX track for a tour itinerary"""
    key = await run_in_threadpool(storage.upload_gpx, file)
    return _out(key)
