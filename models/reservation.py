from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from database import Base


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    program_type = Column(String, nullable=True)
    reservation_date = Column(String, nullable=True, index=True)  # Stored as given by the caller
    reservation_time = Column(String, nullable=True)
    guests = Column(Integer, nullable=True)
    total_amount = Column(Integer, nullable=True)  # Smallest currency unit
    prepaid_amount = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now(), server_default=func.now())

    # No link to email_verifications; the gate check at creation time is the only relationship

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'program_type': self.program_type,
            'reservation_date': self.reservation_date,
            'reservation_time': self.reservation_time,
            'guests': self.guests,
            'total_amount': self.total_amount,
            'prepaid_amount': self.prepaid_amount,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
