"""Stock image search and image upload endpoints."""
from typing import List
from fastapi import APIRouter, Depends, File, Query, UploadFile

from app.core.security import get_current_user_id
from app.schemas.image import DeleteUploadResponse, ExternalImage, ImageSearchResult, UploadResponse
from app.services import file_upload
from app.services.image_search import ImageSearchService, get_image_search_service

router = APIRouter()


@router.get("/search/unsplash", response_model=ImageSearchResult)
async def search_unsplash(
    query: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=50),
    images: ImageSearchService = Depends(get_image_search_service),
):
    return await images.search_unsplash(query, page, per_page)


@router.get("/search/pexels", response_model=ImageSearchResult)
async def search_pexels(
    query: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=80),
    images: ImageSearchService = Depends(get_image_search_service),
):
    return await images.search_pexels(query, page, per_page)


@router.get("/search", response_model=ImageSearchResult)
async def search_images(
    query: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=50),
    images: ImageSearchService = Depends(get_image_search_service),
):
    """Default provider search (Unsplash)."""
    return await images.search_unsplash(query, page, size)


@router.get("/random", response_model=List[ExternalImage])
async def random_images(
    count: int = Query(10, ge=1, le=30),
    images: ImageSearchService = Depends(get_image_search_service),
):
    return await images.random_images(count)


@router.post("/upload", response_model=UploadResponse)
async def upload_images(
    files: List[UploadFile] = File(...),
    user_id: int = Depends(get_current_user_id),
):
    return UploadResponse(urls=await file_upload.save_images(files))


@router.delete("/upload", response_model=DeleteUploadResponse)
async def delete_upload(
    url: str = Query(..., min_length=1),
    user_id: int = Depends(get_current_user_id),
):
    return DeleteUploadResponse(deleted=file_upload.delete_image(url))
