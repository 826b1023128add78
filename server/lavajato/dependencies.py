"""FastAPI dependencies shared by the routers."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from lavajato.errors import AuthenticationError
from lavajato.models.user import User
from lavajato.services.auth_service import decode_access_token
from lavajato.services.booking_service import BookingService
from lavajato.services.database import get_db
from sqlalchemy.ext.asyncio import AsyncSession

bearer_scheme = HTTPBearer(auto_error=False)


def get_booking_service(request: Request) -> BookingService:
    """The BookingService built in the application lifespan."""
    return request.app.state.booking_service


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if credentials is None:
        raise AuthenticationError("missing bearer token")

    payload = decode_access_token(credentials.credentials)
    user = await db.get(User, payload["sub"])
    if not user:
        raise AuthenticationError("user not found")
    return user
