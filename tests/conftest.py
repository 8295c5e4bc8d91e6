import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from cottagetrip.core.dependencies import get_db, get_dispatcher
from cottagetrip.core.jwt_config import create_access_token
from cottagetrip.db.base import Base
from cottagetrip.db.session import build_engine, build_sessionmaker
from cottagetrip.main import app
from cottagetrip.models.room import Room
from cottagetrip.models.room_member import RoomMember

ROOM_ID = "room-1"
ADMIN, BOB, CAROL = "alice", "bob", "carol"


class RecordingDispatcher:
    def __init__(self):
        self.sent = []

    async def send(self, message):
        self.sent.append(message)


@pytest.fixture
async def engine():
    engine = build_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def sessionmaker(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def db(sessionmaker):
    async with sessionmaker() as session:
        yield session


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
async def client(sessionmaker, dispatcher):
    async def override_get_db():
        async with sessionmaker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    def _headers(user_id: str):
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}
    return _headers


@pytest.fixture
def add_member(sessionmaker):
    async def _add(user_id: str, room_id: str = ROOM_ID):
        async with sessionmaker() as session:
            session.add(RoomMember(
                room_id=room_id,
                user_id=user_id,
                email=f"{user_id}@example.com",
                display_name=user_id.title()
            ))
            await session.commit()
    return _add


@pytest.fixture
async def room(sessionmaker, add_member):
    async with sessionmaker() as session:
        session.add(Room(id=ROOM_ID, name="Muskoka", owner_id=ADMIN, currency="CAD"))
        await session.commit()

    # one by one so the join order is alice, bob, carol
    for user_id in (ADMIN, BOB, CAROL):
        await add_member(user_id)

    return ROOM_ID
