from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from cottagetrip.core.errors import AuthorizationError, NotFoundError
from cottagetrip.models.room import Room
from cottagetrip.models.room_member import RoomMember


async def get_room(db: AsyncSession, room_id: str) -> Room:
    res = await db.execute(select(Room).where(Room.id == room_id))
    room = res.scalar_one_or_none()

    if not room:
        raise NotFoundError("Room not found")

    return room


async def list_member_ids(db: AsyncSession, room_id: str) -> List[str]:
    # join order keeps equal splits reproducible across rebalances
    q = (
        select(RoomMember.user_id)
        .where(RoomMember.room_id == room_id)
        .order_by(RoomMember.id)
    )
    res = await db.execute(q)
    return list(res.scalars().all())


async def get_member(db: AsyncSession, room_id: str, user_id: str) -> RoomMember | None:
    q = select(RoomMember).where(
        RoomMember.room_id == room_id,
        RoomMember.user_id == user_id
    )
    res = await db.execute(q)
    return res.scalar_one_or_none()


async def is_member(db: AsyncSession, room_id: str, user_id: str) -> bool:
    return await get_member(db, room_id, user_id) is not None


async def check_room_membership(db: AsyncSession, room_id: str, user_id: str) -> Room:
    room = await get_room(db, room_id)

    if not await is_member(db, room_id, user_id):
        raise AuthorizationError("You are not a member of this room")

    return room


async def check_room_admin(db: AsyncSession, room_id: str, user_id: str) -> Room:
    room = await get_room(db, room_id)

    if room.owner_id != user_id:
        raise AuthorizationError("Only the room admin can do this")

    return room
