from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.dependencies import AdminContext, get_attachments, get_current_admin, get_db
from app.core.uploads import UploadForm, upload_form
from app.core.validation import validate_or_raise
from app.schemas.gallery import GalleryItemOut
from app.services import gallery as gallery_service
from app.services.attachments import AttachmentPipeline

router = APIRouter(prefix="/api/gallery", tags=["Gallery"])


# =====================================================================
#                   UPLOAD IMAGE  (Admin, image required)
# =====================================================================
@router.post("", status_code=201)
def upload_image(
    admin: AdminContext = Depends(get_current_admin),
    form: UploadForm = Depends(upload_form(required=True, images_only=True)),
    attachments: AttachmentPipeline = Depends(get_attachments),
    db: Session = Depends(get_db),
):
    item = gallery_service.create_item(db, attachments, admin, form.fields, form.file)
    return {
        "success": True,
        "message": "Image uploaded successfully",
        "data": {"item": GalleryItemOut.from_record(item).dump()},
    }


# =====================================================================
#                   LIST IMAGES  (Public)
# =====================================================================
@router.get("")
def list_images(request: Request, db: Session = Depends(get_db)):
    query = validate_or_raise("gallery_query", dict(request.query_params))
    items = gallery_service.list_items(db, query)
    return {
        "success": True,
        "message": "Gallery images fetched successfully",
        "data": {"items": [GalleryItemOut.from_record(i).dump() for i in items]},
    }


@router.get("/{item_id}")
def get_image(item_id: str, db: Session = Depends(get_db)):
    item = gallery_service.get_item(db, item_id)
    return {
        "success": True,
        "message": "Gallery image fetched successfully",
        "data": {"item": GalleryItemOut.from_record(item).dump()},
    }


# =====================================================================
#                   UPDATE IMAGE DETAILS  (Admin)
# =====================================================================
@router.put("/{item_id}")
def update_image(
    item_id: str,
    admin: AdminContext = Depends(get_current_admin),
    form: UploadForm = Depends(upload_form()),
    db: Session = Depends(get_db),
):
    item = gallery_service.update_item(db, admin, item_id, form.fields, form.file)
    return {
        "success": True,
        "message": "Image updated successfully",
        "data": {"item": GalleryItemOut.from_record(item).dump()},
    }


# =====================================================================
#                   DELETE IMAGE  (Admin)
# =====================================================================
@router.delete("/{item_id}")
def delete_image(
    item_id: str,
    admin: AdminContext = Depends(get_current_admin),
    attachments: AttachmentPipeline = Depends(get_attachments),
    db: Session = Depends(get_db),
):
    gallery_service.delete_item(db, attachments, admin, item_id)
    return {"success": True, "message": "Image deleted successfully"}
