import os
import tempfile

from fastapi import UploadFile

from core.errors import ValidationError

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")


def validate_image(image: UploadFile) -> None:
    """
    Reject uploads that are not one of the accepted image formats.
    """
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(
            "Invalid file type. Allowed types are: JPEG, PNG, GIF, WEBP."
        )


async def save_upload_to_temp(image: UploadFile) -> str:
    """
    Write an uploaded file to a transient local file and return its path.

    The caller owns the file and must delete it.
    """
    suffix = os.path.splitext(image.filename or "")[1]
    fd, path = tempfile.mkstemp(
        prefix="upload_", suffix=suffix, dir=os.getenv("UPLOAD_TMP_DIR") or None
    )
    try:
        with os.fdopen(fd, "wb") as out:
            out.write(await image.read())
    except Exception:
        os.remove(path)
        raise
    return path
