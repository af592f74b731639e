from dataclasses import dataclass, field

from fastapi import Request
from starlette.datastructures import UploadFile

from app.core.errors import FileRejected, RejectedFileSize, ValidationError
from app.utils.file_helpers import format_file_size
from app.utils.storage import IncomingFile

FILE_FIELD = "attachment"


@dataclass
class UploadForm:
    """Plain fields of a request body plus at most one buffered file."""

    fields: dict = field(default_factory=dict)
    file: IncomingFile | None = None


async def _read_json(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Validation error", [("body", "Request body must be valid JSON")])

    if not isinstance(body, dict):
        raise ValidationError("Validation error", [("body", "Request body must be an object")])
    return body


async def _buffer(upload: UploadFile, pipeline, images_only: bool) -> IncomingFile:
    # Type is checked before a single byte is buffered
    pipeline.check_type(upload.content_type, images_only)

    try:
        data = await upload.read(pipeline.max_size + 1)
    finally:
        await upload.close()

    if len(data) > pipeline.max_size:
        raise RejectedFileSize(
            "File too large",
            [(FILE_FIELD, f"File size must be less than {format_file_size(pipeline.max_size)}")],
        )

    return IncomingFile(
        filename=upload.filename,
        content_type=(upload.content_type or "").lower(),
        data=data,
    )


def upload_form(required: bool = False, images_only: bool = False):
    """
    Build a dependency that parses a JSON, urlencoded or multipart body.

    Multipart bodies may carry a single file, and only under the
    ``attachment`` field.
    """

    async def dependency(request: Request) -> UploadForm:
        pipeline = request.app.state.attachments
        content_type = request.headers.get("content-type", "")

        if content_type.startswith("application/json"):
            if required:
                raise FileRejected("File required", [(FILE_FIELD, "Please upload a file")])
            return UploadForm(await _read_json(request))

        fields, files = {}, []
        if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
            form = await request.form()
            for key, value in form.multi_items():
                if isinstance(value, UploadFile):
                    # browsers send an empty part for an untouched file input
                    if value.filename:
                        files.append((key, value))
                    else:
                        await value.close()
                else:
                    fields[key] = value

        try:
            if len(files) > 1:
                raise FileRejected("Too many files", [(FILE_FIELD, "Only one file is allowed")])

            if files and files[0][0] != FILE_FIELD:
                raise FileRejected(
                    "Unexpected file field",
                    [(files[0][0], f'File must be uploaded with field name "{FILE_FIELD}"')],
                )

            if not files:
                if required:
                    raise FileRejected("File required", [(FILE_FIELD, "Please upload a file")])
                return UploadForm(fields)

            return UploadForm(fields, await _buffer(files[0][1], pipeline, images_only))
        finally:
            for _, upload in files:
                await upload.close()

    return dependency
