from fastapi import APIRouter, Depends, File, UploadFile, status
from typing import List

from quickcourt.core.exceptions import ValidationError
from quickcourt.core.security import require_roles
from quickcourt.models.enums import UserRole
from quickcourt.schemas.venue import ImageRef, MAX_VENUE_IMAGES
from quickcourt.services.storage import SupabaseStorage, get_storage_service

router = APIRouter(dependencies=[Depends(require_roles(UserRole.FACILITY_OWNER, UserRole.ADMIN))])

@router.post("/image", response_model=ImageRef, status_code=status.HTTP_201_CREATED)
def upload_image(
    file: UploadFile = File(...),
    storage: SupabaseStorage = Depends(get_storage_service),
):
    return storage.upload_image(file)

@router.post("/images", response_model=List[ImageRef], status_code=status.HTTP_201_CREATED)
def upload_images(
    files: List[UploadFile] = File(...),
    storage: SupabaseStorage = Depends(get_storage_service),
):
    if len(files) > MAX_VENUE_IMAGES:
        raise ValidationError(f"At most {MAX_VENUE_IMAGES} images can be uploaded at once")
    uploaded = []
    for file in files:
        uploaded.append(storage.upload_image(file))
    return uploaded

@router.delete("/image", status_code=status.HTTP_204_NO_CONTENT)
def delete_image(
    public_id: str,
    storage: SupabaseStorage = Depends(get_storage_service),
):
    storage.delete_image(public_id)
    return None
