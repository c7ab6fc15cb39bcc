"""
Общие фикстуры: in-memory хранилище, пользователи разных ролей, токены.
"""

import asyncio
import os
import tempfile
from uuid import uuid4

os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="workshop-uploads-"))
os.environ["NATS_ENABLED"] = "false"

import bcrypt  # noqa: E402
import pytest  # noqa: E402

from workshop import memory_store  # noqa: E402
from workshop.db.repositories import user_repo  # noqa: E402
from workshop.models.enums import UserRole  # noqa: E402
from workshop.models.order import PhotoUpload  # noqa: E402
from workshop.services.auth_service import create_access_token, user_row_to_read  # noqa: E402

memory_store.activate_memory_store()

PASSWORD = "password123"
# Низкая стоимость bcrypt, чтобы тесты не тратили время на хеширование.
PASSWORD_HASH = bcrypt.hashpw(PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()


@pytest.fixture(autouse=True)
def _clean_store():
    memory_store.reset_memory_store()
    yield
    memory_store.reset_memory_store()


async def create_user(role=UserRole.CLIENT, full_name=None, email=None):
    row = await user_repo.create_user(
        email=email or f"{uuid4().hex[:10]}@example.com",
        password_hash=PASSWORD_HASH,
        full_name=full_name or f"{UserRole(role).value.title()} {uuid4().hex[:4]}",
        role=UserRole(role).value,
    )
    return user_row_to_read(row)


def photo(name="photo.png", mimetype="image/png", size=1024):
    return PhotoUpload(
        filename=f"stored-{uuid4().hex[:8]}-{name}",
        original_name=name,
        mimetype=mimetype,
        size=size,
        path=os.path.join(os.environ["UPLOAD_DIR"], f"missing-{uuid4().hex}-{name}"),
    )


def auth_header(user):
    token = create_access_token(user.user_id, user.email, user.role, user.full_name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user():
    """Синхронное создание пользователя для HTTP-тестов (вне event loop)."""
    def _make(role=UserRole.CLIENT, **kwargs):
        return asyncio.run(create_user(role, **kwargs))
    return _make


@pytest.fixture
async def client_user():
    return await create_user(UserRole.CLIENT, full_name="Анна Клиентова")


@pytest.fixture
async def other_client():
    return await create_user(UserRole.CLIENT, full_name="Борис Другой")


@pytest.fixture
async def master():
    return await create_user(UserRole.MASTER, full_name="Мастер Виктор")


@pytest.fixture
async def other_master():
    return await create_user(UserRole.MASTER, full_name="Мастер Григорий")


@pytest.fixture
async def admin():
    return await create_user(UserRole.ADMIN, full_name="Администратор")


@pytest.fixture
async def manager():
    return await create_user(UserRole.MANAGER, full_name="Менеджер")
