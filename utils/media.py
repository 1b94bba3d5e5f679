"""
Media host client.

Uploads a locally stashed file to the configured media host and returns the
hosted URL, or None when the upload did not succeed. The local file is
removed either way.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


def remove_local_file(local_path: Optional[str]) -> None:
    if not local_path:
        return
    try:
        os.remove(local_path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("Could not remove stashed upload %s", local_path, exc_info=True)


class MediaUploader:
    """Interface: upload(local_path) -> hosted URL or None."""

    def upload(self, local_path: Optional[str]) -> Optional[str]:
        raise NotImplementedError


class HttpMediaUploader(MediaUploader):
    """
    Multipart POST to an upload endpoint (Cloudinary-style unsigned upload API).
    The response JSON is expected to carry `secure_url` or `url`.
    """

    def __init__(
        self,
        upload_url: str,
        api_key: str = "",
        upload_preset: str = "",
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.upload_url = upload_url
        self.api_key = api_key
        self.upload_preset = upload_preset
        self.timeout = timeout

    def upload(self, local_path: Optional[str]) -> Optional[str]:
        if not local_path:
            return None
        if not self.upload_url:
            logger.warning("MEDIA_UPLOAD_URL not configured")
            remove_local_file(local_path)
            return None

        data = {}
        if self.api_key:
            data["api_key"] = self.api_key
        if self.upload_preset:
            data["upload_preset"] = self.upload_preset

        try:
            with open(local_path, "rb") as fh:
                response = requests.post(
                    self.upload_url,
                    files={"file": (os.path.basename(local_path), fh)},
                    data=data,
                    timeout=self.timeout,
                )
            response.raise_for_status()
            body = response.json()
        except requests.Timeout:
            logger.warning("Media upload timed out after %ss: %s", self.timeout, local_path)
            return None
        except (requests.RequestException, ValueError, OSError) as exc:
            logger.warning("Media upload failed for %s: %s", local_path, exc)
            return None
        finally:
            remove_local_file(local_path)

        url = (body.get("secure_url") or body.get("url")) if isinstance(body, dict) else None
        if not url:
            logger.warning("Media host response carried no URL for %s", local_path)
            return None
        logger.info("Uploaded %s to %s", os.path.basename(local_path), url)
        return url
