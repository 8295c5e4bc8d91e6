import jwt
from jwt import ExpiredSignatureError, MissingRequiredClaimError, PyJWTError
from datetime import datetime, timedelta, timezone
from cottagetrip.core.config import settings
from fastapi import HTTPException, Request

ACCESS_COOKIE = "access_token"


def create_access_token(user_id: str, expires_min: int = 30, **claims):
    # tokens normally come from the auth provider, this one is for local runs and tests
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_min)
    payload = {"sub": user_id, "exp": expire, **claims}
    if settings.JWT_AUDIENCE:
        payload.setdefault("aud", settings.JWT_AUDIENCE)

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGO)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGO],
            audience=settings.JWT_AUDIENCE,
            options={
                "require": ["exp", "sub"],
                "verify_aud": settings.JWT_AUDIENCE is not None,
            },
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except MissingRequiredClaimError as e:
        raise HTTPException(status_code=401, detail=f"Token is missing the {e.claim} claim")
    except PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid Token")


def extract_token(request: Request) -> str:
    """Bearer header first, the way the web client calls; cookie for browser sessions."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")

    if scheme.lower() != "bearer" or not token.strip():
        token = request.cookies.get(ACCESS_COOKIE, "")

    if not token.strip():
        raise HTTPException(401, "Unauthorized access")

    return token.strip()
