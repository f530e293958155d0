import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from shared.errors import ValidationError
from shared.observability import print_upload_rejections_total

ALLOWED_EXTENSIONS = (".stl", ".obj", ".3mf")

# mimetypes has no entry for these on most platforms
_MODEL_CONTENT_TYPES = {
    ".stl": "model/stl",
    ".obj": "model/obj",
    ".3mf": "model/3mf",
}


@dataclass(frozen=True)
class UploadedModel:
    filename: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


def guess_content_type(filename: str) -> str:
    guessed, _ = mimetypes.guess_type(filename)
    if guessed:
        return guessed
    return _MODEL_CONTENT_TYPES.get(Path(filename).suffix.lower(), "application/octet-stream")


def check_model_file(filename: Optional[str], size: int, max_bytes: int) -> str:
    """Validate a model upload's name and size; returns the lower-cased extension."""
    if not filename:
        print_upload_rejections_total.labels(reason="missing_name").inc()
        raise ValidationError(["Uploaded file has no name"])

    suffix = Path(filename).suffix.lower()
    if suffix not in ALLOWED_EXTENSIONS:
        print_upload_rejections_total.labels(reason="extension").inc()
        raise ValidationError(["Invalid file type. Only STL, OBJ, and 3MF files are allowed."])

    if size > max_bytes:
        print_upload_rejections_total.labels(reason="too_large").inc()
        raise ValidationError(
            [f"File too large ({size / (1024 * 1024):.1f} MB). Maximum is {max_bytes // (1024 * 1024)} MB."]
        )
    if size <= 0:
        print_upload_rejections_total.labels(reason="empty").inc()
        raise ValidationError(["Uploaded file is empty"])
    return suffix


async def read_model_upload(upload: UploadFile, max_bytes: int) -> UploadedModel:
    # Read one byte past the limit so oversize files are detected without buffering all of them
    content = await upload.read(max_bytes + 1)
    check_model_file(upload.filename, len(content), max_bytes)
    return UploadedModel(
        filename=upload.filename,
        content=content,
        content_type=guess_content_type(upload.filename),
    )


async def read_optional_upload(upload: Optional[UploadFile], max_bytes: int) -> Optional[UploadedModel]:
    # Browsers send an empty, nameless part when no file was picked
    if upload is None or not upload.filename:
        return None
    return await read_model_upload(upload, max_bytes)
