"""
Image hosting on Cloudinary.

Uploads go through Cloudinary's signed REST upload endpoint. Local files are
transient: ``upload_image`` removes them whether or not the upload worked.
"""

import hashlib
import os
import time
from typing import Optional

import httpx
from fastapi import UploadFile

from utils.file_processor import save_upload_to_temp, validate_image
from utils.state import State

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


class MediaUploadError(Exception):
    """Raised when the asset host rejects or fails an upload."""


class CloudinaryMediaStore:
    def __init__(self, cloud_name: str, api_key: str, api_secret: str, timeout: float = 30.0):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def sign(self, params: dict) -> str:
        """Cloudinary signature: sorted ``k=v`` pairs joined by ``&`` plus the secret."""
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode()).hexdigest()

    async def upload(self, path: str, folder: str) -> str:
        if not self.is_configured:
            raise MediaUploadError("Cloudinary credentials are not configured")

        params = {"folder": folder, "timestamp": int(time.time())}
        data = {**params, "api_key": self.api_key, "signature": self.sign(params)}
        url = CLOUDINARY_UPLOAD_URL.format(cloud_name=self.cloud_name)
        try:
            with open(path, "rb") as fh:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(
                        url,
                        data=data,
                        files={"file": (os.path.basename(path), fh)},
                    )
            response.raise_for_status()
        except (httpx.HTTPError, OSError) as e:
            raise MediaUploadError(str(e)) from e

        secure_url = response.json().get("secure_url")
        if not secure_url:
            raise MediaUploadError("Upload response did not include a secure_url")
        return secure_url


def get_media_store() -> CloudinaryMediaStore:
    return CloudinaryMediaStore(
        cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME"),
        api_key=os.getenv("CLOUDINARY_API_KEY"),
        api_secret=os.getenv("CLOUDINARY_API_SECRET"),
    )


async def upload_image(store, local_path: Optional[str]) -> Optional[str]:
    """Upload ``local_path`` to the configured folder and return its public URL.

    Returns ``None`` when there is nothing to upload. The local file is
    deleted after the attempt, on success and on failure.
    """
    if not local_path:
        return None
    try:
        url = await store.upload(local_path, os.getenv("CLOUDINARY_FOLDER", "SPACE_G"))
        State.logger.info(f"Uploaded image to {url}")
        return url
    finally:
        try:
            os.remove(local_path)
        except FileNotFoundError:
            pass


async def store_upload(store, image: Optional[UploadFile]) -> Optional[str]:
    if image is None or not image.filename:
        return None
    validate_image(image)
    path = await save_upload_to_temp(image)
    return await upload_image(store, path)
