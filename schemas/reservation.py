from pydantic import BaseModel
from typing import Optional, List, Any, Dict


class ReserveRequest(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    guests: Optional[int] = None
    program_type: Optional[str] = None
    total_price: Optional[int] = None
    prepaid_price: Optional[int] = None

    def to_fields(self) -> Dict[str, Any]:
        """Map the public request names onto reservation columns."""
        return {
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "program_type": self.program_type,
            "reservation_date": self.date,
            "reservation_time": self.time,
            "guests": self.guests,
            "total_amount": self.total_price,
            "prepaid_amount": self.prepaid_price,
        }


class ReserveResponse(BaseModel):
    success: bool
    reservation_id: int


class ReservationListResponse(BaseModel):
    success: bool
    data: List[Dict[str, Any]]
