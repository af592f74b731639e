import cloudinary
import cloudinary.uploader

from app.core.config import Settings


def configure_cloudinary(settings: Settings):
    cloudinary.config(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        secure=True,
    )


def upload_file(
    data: bytes,
    folder: str,
    public_id: str,
    timeout: int,
    uploader=cloudinary.uploader,
) -> dict:
    """Upload raw bytes; raises on any provider / network error."""
    result = uploader.upload(
        data,
        folder=folder,
        public_id=public_id,
        resource_type="auto",
        timeout=timeout,
    )

    if not result or not result.get("secure_url"):
        raise RuntimeError("Cloudinary upload returned no URL")

    return {
        "url": result.get("secure_url"),
        "public_id": result.get("public_id"),
        "format": result.get("format"),
        "resource_type": result.get("resource_type"),
        "width": result.get("width"),
        "height": result.get("height"),
        "bytes": result.get("bytes"),
    }


def delete_file(public_id: str, resource_type: str | None = None, uploader=cloudinary.uploader) -> bool:
    result = uploader.destroy(
        public_id,
        resource_type=resource_type or "image",
        invalidate=True,
    )
    # "not found" means there is nothing left to clean up
    return (result or {}).get("result") in ("ok", "not found")
