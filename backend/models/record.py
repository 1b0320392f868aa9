"""
Pydantic record models held by the in-memory record store.

Every record carries the store-assigned ``row_number`` identifier plus the
typed fields of its schema. Text fields default to empty strings, never None.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

TRUE_VALUES = frozenset({'Y', 'YES', 'TRUE', '1'})


class RecordBase(BaseModel):
    """Common base for all record shapes."""

    row_number: int = Field(0, ge=0, description="Store-assigned identifier (0 until stored)")

    class Config:
        validate_assignment = True

    @field_validator('email_address', check_fields=False)
    @classmethod
    def validate_email_address(cls, value: str) -> str:
        """Reject values that cannot be an e-mail address. Empty is allowed."""
        if value and ('@' not in value or any(ch.isspace() for ch in value)):
            raise ValueError(f"'{value}' is not a valid e-mail address")
        return value


class ParticipantRecord(RecordBase):
    """Participant record (13 text columns)."""

    name: str = ''
    surname: str = ''
    identifier: str = ''
    email_address: str = ''
    local_municipality: str = ''
    host_company: str = ''
    lead_company: str = ''
    job_type: str = ''
    demographic_group: str = ''
    sex: str = ''
    contact_details: str = ''
    employment_status: str = ''
    person_disability: str = ''

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()

    @property
    def has_disability(self) -> bool:
        return self.person_disability.strip().upper() in TRUE_VALUES


class PlacementRecord(RecordBase):
    """Legacy placement record with typed columns."""

    serial_number: int = 0
    name: str = ''
    surname: str = ''
    id_number: str = ''
    email_address: str = ''
    contact_number: str = ''
    age: int = 0
    gender: str = ''
    race: str = ''
    disability: bool = False
    municipality: str = ''
    host_company: str = ''
    job_title: str = ''
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    monthly_stipend: int = 0
    employed: bool = False
    comments: str = ''

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()
