from fastapi import Request
from cottagetrip.core.jwt_config import decode_token, extract_token
from cottagetrip.services.notifications import ReminderDispatcher


async def get_db(request: Request):
    async with request.app.state.sessionmaker() as session:
        yield session


async def get_current_user_id(request: Request) -> str:
    # the auth provider's subject is the user id everywhere in this service
    payload = decode_token(extract_token(request))
    return str(payload["sub"])


def get_dispatcher(request: Request) -> ReminderDispatcher:
    return request.app.state.dispatcher
