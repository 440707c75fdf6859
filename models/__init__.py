from .email_verification import EmailVerification
from .reservation import Reservation

__all__ = ['EmailVerification', 'Reservation']
