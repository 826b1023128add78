"""Phone login endpoints."""

from fastapi import APIRouter, Depends
from lavajato.schemas import PhoneLoginRequest, PhoneVerificationRequest
from lavajato.services import auth_service
from lavajato.services.database import get_db
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter()


@router.post("/send-code")
async def send_code(payload: PhoneVerificationRequest):
    return await auth_service.send_verification_code(payload.phone_number)


@router.post("/verify")
async def verify(payload: PhoneLoginRequest, db: AsyncSession = Depends(get_db)):
    return await auth_service.verify_and_login(
        db, payload.phone_number, payload.verification_code
    )
