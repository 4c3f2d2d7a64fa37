import httpx
import logging

from food_service.application.interfaces import ObjectStorage
from food_service.domain.exceptions import StorageError

logger = logging.getLogger(__name__)


class HTTPObjectStorageClient(ObjectStorage):
    """Client for the hosted object storage REST API"""

    def __init__(self, base_url: str, api_key: str, timeout: float = 30.0):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout

    async def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> None:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self._base_url}/storage/v1/object/{bucket}/{path}",
                    content=content,
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "apikey": self._api_key,
                        "Content-Type": content_type
                    },
                    timeout=self._timeout
                )
        except httpx.RequestError as e:
            logger.error(f"Object storage connection error: {e}")
            raise StorageError(f"Object storage unavailable: {str(e)}")

        if response.status_code not in (200, 201):
            logger.error(f"Object storage returned {response.status_code}: {response.text}")
            raise StorageError(f"Object storage error: {response.status_code} {response.text}")
        logger.info(f"Uploaded {bucket}/{path}")

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{path}"
