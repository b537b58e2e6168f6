"""Contact card payloads (``"type": "contacts"``)."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .messages import _OutboundMessage


class ContactName(BaseModel):
    formatted_name: str = Field(..., min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    middle_name: Optional[str] = None
    prefix: Optional[str] = None
    suffix: Optional[str] = None


class ContactAddress(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    type: Optional[str] = Field(None, description="HOME or WORK")


class ContactEmail(BaseModel):
    email: str
    type: Optional[str] = None


class ContactOrg(BaseModel):
    company: Optional[str] = None
    department: Optional[str] = None
    title: Optional[str] = None


class ContactPhone(BaseModel):
    """A phone number; ``wa_id`` adds a "Message" button on the card."""
    phone: str
    type: Optional[str] = None
    wa_id: Optional[str] = None


class ContactUrl(BaseModel):
    url: str
    type: Optional[str] = None


class Contact(BaseModel):
    name: ContactName
    addresses: Optional[List[ContactAddress]] = None
    birthday: Optional[str] = Field(None, description="YYYY-MM-DD")
    emails: Optional[List[ContactEmail]] = None
    org: Optional[ContactOrg] = None
    phones: Optional[List[ContactPhone]] = None
    urls: Optional[List[ContactUrl]] = None


class SendContactsMessage(_OutboundMessage):
    type: Literal["contacts"] = "contacts"
    contacts: List[Contact] = Field(..., min_length=1)
