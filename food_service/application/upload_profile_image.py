import logging
import os
import time
import uuid
from typing import Optional

import aiofiles
import aiofiles.os

from food_service.domain.exceptions import InvalidInputError, UserNotFoundError
from food_service.application.interfaces import ObjectStorage

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class UploadProfileImageUseCase:
    """Streams the image into a local buffer, pushes it to object storage and
    stores the public URL on the user. The buffer file is always removed.

    `source` is anything with an async `read(size)`, such as an UploadFile.
    No more than `max_bytes + 1` bytes are ever read from it.
    """

    def __init__(self, unit_of_work, storage: ObjectStorage, bucket: str, upload_dir: str, max_bytes: int):
        self._uow = unit_of_work
        self._storage = storage
        self._bucket = bucket
        self._upload_dir = upload_dir
        self._max_bytes = max_bytes

    async def __call__(
        self,
        user_id: Optional[int],
        filename: Optional[str],
        content_type: Optional[str],
        source,
    ) -> str:
        if source is None:
            raise InvalidInputError("No file uploaded")
        if not content_type or not content_type.startswith("image/"):
            raise InvalidInputError("Only image files are allowed!")

        ext = os.path.splitext(filename or "")[1]
        os.makedirs(self._upload_dir, exist_ok=True)
        local_path = os.path.join(self._upload_dir, f"profile-{uuid.uuid4().hex}{ext}")

        try:
            if not await self._buffer(source, local_path):
                raise InvalidInputError("No file uploaded")
            if not user_id:
                raise InvalidInputError("User ID is required")

            async with self._uow() as uow:
                if not await uow.users.get_by_id(user_id):
                    raise UserNotFoundError("User not found")

            millis = int(time.time() * 1000)
            object_path = f"profile_images/profile-{user_id}-{millis}{ext}"

            async with aiofiles.open(local_path, "rb") as buffer:
                data = await buffer.read()
            await self._storage.upload(self._bucket, object_path, data, content_type)
            image_url = self._storage.public_url(self._bucket, object_path)

            async with self._uow() as uow:
                await uow.users.update(user_id, {"profile_image": image_url})
                await uow.commit()
        finally:
            if await aiofiles.os.path.exists(local_path):
                await aiofiles.os.remove(local_path)

        logger.info(f"Profile image for user {user_id} stored at {image_url}")
        return image_url

    async def _buffer(self, source, local_path: str) -> int:
        """Copies source into local_path chunk by chunk; returns the byte count"""
        size = 0
        async with aiofiles.open(local_path, "wb") as buffer:
            while True:
                chunk = await source.read(min(CHUNK_SIZE, self._max_bytes + 1 - size))
                if not chunk:
                    break
                size += len(chunk)
                if size > self._max_bytes:
                    logger.warning(f"Upload rejected after {size} bytes (limit {self._max_bytes})")
                    raise InvalidInputError(f"File too large (limit {self._max_bytes} bytes)")
                await buffer.write(chunk)
        return size
