"""
Services package for the Lavajato booking API.
"""

from .booking_service import BookingService
from .notification_service import CompletionNotifier, NullNotifier, WhatsAppNotifier

__all__ = [
    "BookingService",
    "CompletionNotifier",
    "NullNotifier",
    "WhatsAppNotifier",
]
