"""
Completion notifications over WhatsApp (Twilio).

When an appointment moves into ``completed`` the customer gets a WhatsApp
message with the vehicle, unit and price. Delivery is best effort: one
attempt, bounded by a timeout, every failure logged and swallowed.

Without valid Twilio credentials the application runs with ``NullNotifier``,
so call sites never check whether messaging is configured.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from typing import Optional

from lavajato.models.appointment import Appointment
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import selectinload
from twilio.rest import Client

logger = logging.getLogger(__name__)


class CompletionNotifier(ABC):
    """Contract for telling a customer their wash is done."""

    @abstractmethod
    async def notify_completion(self, appointment_id: str) -> bool:
        """
        Notify the appointment's customer that the service is finished.

        Must never raise.

        Returns:
            True if the message was accepted by the provider, False otherwise
        """


class NullNotifier(CompletionNotifier):
    """Used when messaging is not configured."""

    async def notify_completion(self, appointment_id: str) -> bool:
        logger.debug(f"Messaging not configured, skipping notice for appointment {appointment_id}")
        return False


def normalize_whatsapp_number(phone_number: str) -> str:
    """'+55 (11) 98765-4321' -> 'whatsapp:+5511987654321'."""
    digits = re.sub(r"\D", "", phone_number or "")
    if not digits:
        raise ValueError(f"Phone number has no digits: {phone_number!r}")
    return f"whatsapp:+{digits}"


def format_completion_message(appointment: Appointment) -> str:
    user = appointment.user
    vehicle = appointment.vehicle
    unit = appointment.unit

    return (
        "🚗💧 *Lavajato - Serviço Finalizado!*\n\n"
        f"Olá {user.name}! Seu serviço foi finalizado com sucesso.\n\n"
        "📋 *Detalhes do Serviço:*\n"
        f"• Carro: {vehicle.model} - {vehicle.license_plate}\n"
        f"• Unidade: {unit.name}\n"
        f"• Endereço: {unit.address}\n"
        f"• Preço: R$ {appointment.final_price:.2f}\n\n"
        "Obrigado por escolher nosso lavajato! 🚿✨"
    )


class WhatsAppNotifier(CompletionNotifier):
    """
    Twilio WhatsApp notifier.

    Loads appointment details in its own session because it runs detached
    from the request that triggered it.
    """

    def __init__(
        self,
        client: Client,
        from_number: str,
        session_maker: async_sessionmaker,
        timeout: float = 10.0,
    ):
        """
        Args:
            client: Twilio REST client
            from_number: WhatsApp-enabled sender (E.164, without the 'whatsapp:' prefix)
            session_maker: Factory for database sessions
            timeout: Seconds allowed for the provider call
        """
        self.client = client
        self.from_number = from_number
        self.session_maker = session_maker
        self.timeout = timeout

    async def _load_appointment(self, appointment_id: str) -> Optional[Appointment]:
        async with self.session_maker() as db:
            stmt = (
                select(Appointment)
                .options(
                    selectinload(Appointment.user),
                    selectinload(Appointment.vehicle),
                    selectinload(Appointment.unit),
                )
                .where(Appointment.id == appointment_id)
            )
            result = await db.execute(stmt)
            return result.scalar_one_or_none()

    async def notify_completion(self, appointment_id: str) -> bool:
        try:
            appointment = await self._load_appointment(appointment_id)
            if not appointment:
                logger.error(f"Appointment {appointment_id} not found for completion notice")
                return False

            to_number = normalize_whatsapp_number(appointment.user.phone_number)
            body = format_completion_message(appointment)

            # Twilio's client is blocking; run it in the default executor
            loop = asyncio.get_running_loop()
            message = await asyncio.wait_for(
                loop.run_in_executor(
                    None,
                    lambda: self.client.messages.create(
                        body=body,
                        from_=f"whatsapp:{self.from_number}",
                        to=to_number,
                    ),
                ),
                timeout=self.timeout,
            )

            logger.info(
                f"Completion notice sent for appointment {appointment_id} "
                f"to {appointment.user.phone_number} (sid={getattr(message, 'sid', None)})"
            )
            return True

        except asyncio.TimeoutError:
            logger.error(
                f"Timed out after {self.timeout}s sending completion notice "
                f"for appointment {appointment_id}"
            )
            return False
        except Exception as e:
            logger.error(
                f"Failed to send completion notice for appointment {appointment_id}: {e}",
                exc_info=True,
            )
            return False


def twilio_configured(account_sid: str, auth_token: str, from_number: str) -> bool:
    return bool(account_sid and auth_token and from_number and account_sid.startswith("AC"))


def build_notifier(settings, session_maker: async_sessionmaker) -> CompletionNotifier:
    """Create the notifier once at startup from settings."""
    if not twilio_configured(
        settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN, settings.TWILIO_WHATSAPP_FROM
    ):
        logger.warning("⚠️  Twilio not configured, completion notices disabled")
        return NullNotifier()

    try:
        client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
    except Exception as e:
        logger.error(f"Error creating Twilio client: {e}", exc_info=True)
        logger.warning("⚠️  Falling back to disabled completion notices")
        return NullNotifier()

    logger.info(f"WhatsApp completion notices enabled from {settings.TWILIO_WHATSAPP_FROM}")
    return WhatsAppNotifier(
        client=client,
        from_number=settings.TWILIO_WHATSAPP_FROM,
        session_maker=session_maker,
        timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
    )
