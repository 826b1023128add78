"""
Phone-number login.

SMS delivery is not wired up: ``send_verification_code`` only logs and the
only accepted code is ``settings.VERIFICATION_CODE``. A first login creates
the user with placeholder address fields.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from lavajato.config import settings
from lavajato.errors import AuthenticationError
from lavajato.models.user import User
from lavajato.services.registry import create_user, find_user_by_phone
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

PLACEHOLDER_ADDRESS = {
    "address": "Endereço não informado",
    "neighborhood": "Bairro não informado",
    "city": "Cidade não informada",
    "state": "UF",
    "postal_code": "00000-000",
}


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"sub": user.id, "phone_number": user.phone_number, "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode a bearer token; raises AuthenticationError when invalid or expired."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        raise AuthenticationError("invalid token") from e

    if not payload.get("sub"):
        raise AuthenticationError("invalid token")
    return payload


async def send_verification_code(phone_number: str) -> Dict[str, str]:
    logger.info(f"Verification code requested for {phone_number}")
    return {"message": "verification code sent"}


async def verify_and_login(db: AsyncSession, phone_number: str, code: str) -> Dict[str, Any]:
    """
    Check the code, find or create the user and issue an access token.

    Returns:
        {
            "access_token": str,
            "token_type": "bearer",
            "user": {"id", "name", "phone_number", "loyalty_points"},
            "requires_registration": bool
        }
    """
    if code != settings.VERIFICATION_CODE:
        logger.warning(f"Invalid verification code for {phone_number}")
        raise AuthenticationError("invalid verification code")

    user = await find_user_by_phone(db, phone_number)
    if not user:
        logger.info(f"First login for {phone_number}, creating user")
        user = await create_user(
            db,
            name=f"Usuário {phone_number[-4:]}",
            phone_number=phone_number,
            loyalty_points=0,
            **PLACEHOLDER_ADDRESS,
        )

    return {
        "access_token": create_access_token(user),
        "token_type": "bearer",
        "user": {
            "id": user.id,
            "name": user.name,
            "phone_number": user.phone_number,
            "loyalty_points": user.loyalty_points,
        },
        "requires_registration": user.requires_registration,
    }
