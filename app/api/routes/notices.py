from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.dependencies import AdminContext, get_attachments, get_current_admin, get_db
from app.core.uploads import UploadForm, upload_form
from app.core.validation import validate_or_raise
from app.schemas.notice import NoticeOut
from app.services import notices as notice_service
from app.services.attachments import AttachmentPipeline

router = APIRouter(prefix="/api/notices", tags=["Notices"])


# =====================================================================
#                   CREATE NOTICE  (Admin, optional attachment)
# =====================================================================
@router.post("", status_code=201)
def create_notice(
    admin: AdminContext = Depends(get_current_admin),
    form: UploadForm = Depends(upload_form()),
    attachments: AttachmentPipeline = Depends(get_attachments),
    db: Session = Depends(get_db),
):
    notice = notice_service.create_notice(db, attachments, admin, form.fields, form.file)
    return {
        "success": True,
        "message": "Notice created successfully",
        "data": {"notice": NoticeOut.from_record(notice).dump()},
    }


# =====================================================================
#                   LIST NOTICES  (Public, paginated)
# =====================================================================
@router.get("")
def list_notices(request: Request, db: Session = Depends(get_db)):
    query = validate_or_raise("pagination", dict(request.query_params))
    notices, pagination = notice_service.list_notices(db, query)
    return {
        "success": True,
        "message": "Notices retrieved successfully",
        "data": {
            "notices": [NoticeOut.from_record(n).dump() for n in notices],
            "pagination": pagination.dump(),
        },
    }


# =====================================================================
#                   NOTICE DETAILS  (Public)
# =====================================================================
@router.get("/{notice_id}")
def get_notice(notice_id: str, db: Session = Depends(get_db)):
    notice = notice_service.get_notice(db, notice_id)
    return {
        "success": True,
        "message": "Notice retrieved successfully",
        "data": {"notice": NoticeOut.from_record(notice).dump()},
    }


# =====================================================================
#                   UPDATE NOTICE  (Admin, optional file swap)
# =====================================================================
@router.put("/{notice_id}")
def update_notice(
    notice_id: str,
    admin: AdminContext = Depends(get_current_admin),
    form: UploadForm = Depends(upload_form()),
    attachments: AttachmentPipeline = Depends(get_attachments),
    db: Session = Depends(get_db),
):
    notice = notice_service.update_notice(
        db, attachments, admin, notice_id, form.fields, form.file
    )
    return {
        "success": True,
        "message": "Notice updated successfully",
        "data": {"notice": NoticeOut.from_record(notice).dump()},
    }


# =====================================================================
#                   DELETE NOTICE  (Admin)
# =====================================================================
@router.delete("/{notice_id}")
def delete_notice(
    notice_id: str,
    admin: AdminContext = Depends(get_current_admin),
    attachments: AttachmentPipeline = Depends(get_attachments),
    db: Session = Depends(get_db),
):
    deleted = notice_service.delete_notice(db, attachments, admin, notice_id)
    return {
        "success": True,
        "message": "Notice deleted successfully",
        "data": {"deletedNotice": deleted},
    }
