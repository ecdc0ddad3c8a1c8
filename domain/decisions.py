"""Admission decisions returned to callers instead of raised errors"""
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from domain.entities import Reservation
from domain.enums import RejectionReason
from domain.value_objects import ConflictDetail, Pricing


class Accepted(BaseModel):
    """The reservation was admitted and persisted"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["accepted"] = "accepted"
    reservation: Reservation
    pricing: Pricing

    @property
    def accepted(self) -> bool:
        return True


class Rejected(BaseModel):
    """A business rule refused the request; nothing was written"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["rejected"] = "rejected"
    reason: RejectionReason
    message: str
    conflict_detail: Optional[ConflictDetail] = None

    @property
    def accepted(self) -> bool:
        return False

    @property
    def code(self) -> str:
        return self.reason.code

    @classmethod
    def because(cls, reason: RejectionReason, message: Optional[str] = None,
                conflict_detail: Optional[ConflictDetail] = None) -> "Rejected":
        return cls(reason=reason, message=message or reason.message, conflict_detail=conflict_detail)


Decision = Union[Accepted, Rejected]
