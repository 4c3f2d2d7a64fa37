from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from food_service.config import Settings
from food_service.domain.exceptions import StorageError
from food_service.infrastructure.http_clients import HTTPObjectStorageClient
from food_service.infrastructure.security import BcryptPasswordHasher
from food_service.infrastructure.unit_of_work import UnitOfWork


@pytest.fixture
def session():
    session = AsyncMock()
    session.__aenter__.return_value = session
    session.__aexit__.return_value = False
    return session


@pytest.fixture
def unit_of_work(session):
    return UnitOfWork(MagicMock(return_value=session))


class TestUnitOfWork:
    @pytest.mark.asyncio
    async def test_commit_reaches_session(self, session, unit_of_work):
        async with unit_of_work() as uow:
            await uow.commit()

        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_database_error_becomes_storage_error(self, session, unit_of_work):
        session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection lost"))

        with pytest.raises(StorageError):
            async with unit_of_work() as uow:
                await uow.orders.get_by_id(1)

        session.rollback.assert_awaited()

    @pytest.mark.asyncio
    async def test_other_errors_pass_through(self, session, unit_of_work):
        with pytest.raises(KeyError):
            async with unit_of_work():
                raise KeyError("boom")

        session.rollback.assert_awaited()

    @pytest.mark.asyncio
    async def test_raw_sqlalchemy_error(self, unit_of_work):
        with pytest.raises(StorageError, match="deadlock"):
            async with unit_of_work():
                raise SQLAlchemyError("deadlock detected")


class TestBcryptPasswordHasher:
    def test_hash_and_verify(self):
        hasher = BcryptPasswordHasher(rounds=4)
        hashed = hasher.hash("s3cret")

        assert hashed != "s3cret"
        assert hashed.startswith("$2")
        assert hasher.verify("s3cret", hashed)
        assert not hasher.verify("wrong", hashed)

    def test_non_bcrypt_value_never_matches(self):
        hasher = BcryptPasswordHasher(rounds=4)
        assert not hasher.verify("plain", "plain")
        assert not hasher.verify("anything", "")


def storage_client_mock(response=None, error=None):
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    client.post = AsyncMock(return_value=response, side_effect=error)
    return client


class TestHTTPObjectStorageClient:
    @pytest.mark.asyncio
    async def test_upload_posts_to_bucket_path(self):
        client = storage_client_mock(response=MagicMock(status_code=200))
        storage = HTTPObjectStorageClient("https://files.example.com/", "key-123")

        with patch("food_service.infrastructure.http_clients.httpx.AsyncClient", return_value=client):
            await storage.upload("profile-images", "profile_images/a.png", b"data", "image/png")

        args, kwargs = client.post.call_args
        assert args[0] == "https://files.example.com/storage/v1/object/profile-images/profile_images/a.png"
        assert kwargs["content"] == b"data"
        assert kwargs["headers"]["Authorization"] == "Bearer key-123"
        assert kwargs["headers"]["Content-Type"] == "image/png"

    @pytest.mark.asyncio
    async def test_error_status(self):
        client = storage_client_mock(response=MagicMock(status_code=403, text="forbidden"))
        storage = HTTPObjectStorageClient("https://files.example.com", "key")

        with patch("food_service.infrastructure.http_clients.httpx.AsyncClient", return_value=client):
            with pytest.raises(StorageError, match="403"):
                await storage.upload("b", "p.png", b"x", "image/png")

    @pytest.mark.asyncio
    async def test_connection_error(self):
        client = storage_client_mock(error=httpx.ConnectError("refused"))
        storage = HTTPObjectStorageClient("https://files.example.com", "key")

        with patch("food_service.infrastructure.http_clients.httpx.AsyncClient", return_value=client):
            with pytest.raises(StorageError, match="Object storage unavailable"):
                await storage.upload("b", "p.png", b"x", "image/png")

    def test_public_url(self):
        storage = HTTPObjectStorageClient("https://files.example.com", "key")
        assert storage.public_url("profile-images", "profile_images/a.png") == (
            "https://files.example.com/storage/v1/object/public/profile-images/profile_images/a.png"
        )


class TestSettings:
    @pytest.mark.parametrize("raw, expected", [
        ("postgres://u:p@db:5432/food", "postgresql+asyncpg://u:p@db:5432/food"),
        ("postgresql://u:p@db:5432/food", "postgresql+asyncpg://u:p@db:5432/food"),
        ("postgresql+asyncpg://u:p@db/food", "postgresql+asyncpg://u:p@db/food"),
    ])
    def test_database_url_uses_asyncpg(self, monkeypatch, raw, expected):
        monkeypatch.setenv("POSTGRES_CONNECTION_STRING", raw)
        assert Settings().DATABASE_URL == expected
