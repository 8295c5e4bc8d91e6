from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from cottagetrip.core.utils import compute_net_balances, compute_settlements
from cottagetrip.models.expense import Expense
from cottagetrip.services.room_services import check_room_membership


async def get_room_net_map(db: AsyncSession, room_id: str):
    q = (
        select(Expense)
        .options(selectinload(Expense.splits))
        .where(Expense.room_id == room_id)
        .order_by(Expense.created_at, Expense.id)
    )
    res = await db.execute(q)

    # recomputed from scratch on every read, rental included
    return compute_net_balances(res.scalars().all())


async def get_room_balances(db: AsyncSession, room_id: str, user_id: str):
    await check_room_membership(db, room_id, user_id)

    net = await get_room_net_map(db, room_id)
    transfers = compute_settlements(net)

    return {
        "net": {uid: amount for uid, amount in net.items() if amount != 0},
        "settlements": [t._asdict() for t in transfers],
        "my_net_cents": net.get(user_id, 0),
        "my_settlements": [
            t._asdict() for t in transfers
            if user_id in (t.from_user_id, t.to_user_id)
        ]
    }
