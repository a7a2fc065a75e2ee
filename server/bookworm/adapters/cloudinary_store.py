"""CloudinaryImageStore - 通过 Cloudinary REST API 上传 / 删除图片"""

import hashlib
import logging
import re
import time
from urllib.parse import urlparse

import httpx

from .base import ImageStore, ImageStoreError

logger = logging.getLogger(__name__)

_VERSION_SEGMENT = re.compile(r"^v\d+$")


class CloudinaryImageStore(ImageStore):
    """
    Cloudinary 图床适配器。
    上传与删除均走签名接口：signature = sha1(排序后的参数串 + api_secret)。
    """

    name = "cloudinary"

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder.strip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings) -> "CloudinaryImageStore":
        return cls(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            folder=settings.CLOUDINARY_FOLDER,
            timeout=settings.IMAGE_STORE_TIMEOUT_SECONDS,
        )

    @property
    def base_url(self) -> str:
        return f"https://api.cloudinary.com/v1_1/{self.cloud_name}/image"

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    # ─── 对外接口 ──────────────────────────────

    def owns(self, url: str) -> bool:
        host = urlparse(url).hostname or ""
        return host == "cloudinary.com" or host.endswith(".cloudinary.com")

    async def upload(self, image: str) -> str:
        params = {}
        if self.folder:
            params["folder"] = self.folder
        payload = await self._request("upload", params, file=image)
        secure_url = payload.get("secure_url")
        if not secure_url:
            raise ImageStoreError("Cloudinary upload response missing secure_url")
        return secure_url

    async def delete(self, url: str) -> None:
        public_id = self.public_id_from_url(url)
        payload = await self._request("destroy", {"public_id": public_id})
        # "not found" 视为已删除
        result = payload.get("result")
        if result not in ("ok", "not found"):
            raise ImageStoreError(f"Cloudinary destroy returned {result!r} for {public_id}")

    # ─── helpers ──────────────────────────────

    @staticmethod
    def public_id_from_url(url: str) -> str:
        """
        从投递 URL 中解析 public_id，例如：
        https://res.cloudinary.com/demo/image/upload/v1712/books/cover.jpg -> books/cover
        """
        segments = [s for s in urlparse(url).path.split("/") if s]
        if "upload" in segments:
            segments = segments[segments.index("upload") + 1:]
        # 版本号之前可能是 transformation 段，一并跳过
        for idx, segment in enumerate(segments):
            if _VERSION_SEGMENT.match(segment):
                segments = segments[idx + 1:]
                break
        if not segments:
            raise ImageStoreError(f"Cannot derive public_id from {url}")
        segments[-1] = segments[-1].rsplit(".", 1)[0]
        return "/".join(segments)

    def sign(self, params: dict) -> str:
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode()).hexdigest()

    async def _request(self, action: str, params: dict, file: str | None = None) -> dict:
        if not self.is_configured:
            raise ImageStoreError("Cloudinary credentials are not configured")

        signed = {**params, "timestamp": int(time.time())}
        data = {**signed, "api_key": self.api_key, "signature": self.sign(signed)}
        if file is not None:
            data["file"] = file

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(f"/{action}", data=data)
        except httpx.HTTPError as e:
            raise ImageStoreError(f"Cloudinary {action} request failed: {e}") from e

        if response.status_code >= 400:
            try:
                detail = response.json().get("error", {}).get("message", response.text)
            except ValueError:
                detail = response.text
            raise ImageStoreError(f"Cloudinary {action} error ({response.status_code}): {detail}")

        try:
            return response.json()
        except ValueError as e:
            raise ImageStoreError(f"Cloudinary {action} returned invalid JSON") from e
