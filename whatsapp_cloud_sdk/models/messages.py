"""
Message payloads for the /{phone-number-id}/messages endpoint.

Field names follow the Cloud API wire format. Payloads are serialised with
``to_payload()``, which drops unset optional fields.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class MediaType(str, Enum):
    """Media kinds accepted by the messages endpoint."""
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    STICKER = "sticker"


class MessageContext(BaseModel):
    """Marks a message as a reply to an earlier one."""
    message_id: str = Field(..., min_length=1)


class _OutboundMessage(BaseModel):
    messaging_product: Literal["whatsapp"] = "whatsapp"
    recipient_type: Literal["individual"] = "individual"
    to: str = Field(..., min_length=1, description="Recipient phone number or WhatsApp ID")
    context: Optional[MessageContext] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class TextBody(BaseModel):
    body: str
    preview_url: bool = False


class SendTextMessage(_OutboundMessage):
    type: Literal["text"] = "text"
    text: TextBody

    @classmethod
    def create(cls, to: str, body: str, preview_url: bool = False) -> "SendTextMessage":
        return cls(to=to, text=TextBody(body=body, preview_url=preview_url))


class MediaObject(BaseModel):
    """Media reference: an uploaded media ID or a public link, never both."""
    id: Optional[str] = None
    link: Optional[str] = None
    caption: Optional[str] = None
    filename: Optional[str] = None

    @model_validator(mode="after")
    def check_source(self):
        if bool(self.id) == bool(self.link):
            raise ValueError("exactly one of 'id' or 'link' is required")
        return self


class SendMediaMessage(_OutboundMessage):
    type: MediaType

    image: Optional[MediaObject] = None
    audio: Optional[MediaObject] = None
    video: Optional[MediaObject] = None
    document: Optional[MediaObject] = None
    sticker: Optional[MediaObject] = None

    @classmethod
    def create(
        cls,
        to: str,
        media_type: MediaType,
        media_id: Optional[str] = None,
        link: Optional[str] = None,
        caption: Optional[str] = None,
        filename: Optional[str] = None
    ) -> "SendMediaMessage":
        media_type = MediaType(media_type)
        media = MediaObject(id=media_id, link=link, caption=caption, filename=filename)
        return cls(to=to, type=media_type, **{media_type.value: media})

    @model_validator(mode="after")
    def check_media_slot(self):
        if getattr(self, self.type.value) is None:
            raise ValueError(f"'{self.type.value}' object is required for type '{self.type.value}'")
        return self


class Location(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    name: Optional[str] = None
    address: Optional[str] = None


class SendLocationMessage(_OutboundMessage):
    type: Literal["location"] = "location"
    location: Location


class Parameter(BaseModel):
    """
    Template parameter.

    Only the slot matching ``type`` should be set (``text`` for text,
    ``currency`` for currency, and so on).
    """
    type: Literal["text", "currency", "date_time", "image", "document", "video", "payload"]
    text: Optional[str] = None
    payload: Optional[str] = None
    currency: Optional[Dict[str, Any]] = None
    date_time: Optional[Dict[str, Any]] = None
    image: Optional[Dict[str, Any]] = None
    document: Optional[Dict[str, Any]] = None
    video: Optional[Dict[str, Any]] = None


class Component(BaseModel):
    type: Literal["header", "body", "button"]
    sub_type: Optional[str] = None
    index: Optional[str] = None
    parameters: List[Parameter] = Field(default_factory=list)


class TemplateLanguage(BaseModel):
    code: str = "en_US"


class Template(BaseModel):
    name: str
    language: TemplateLanguage = Field(default_factory=TemplateLanguage)
    components: Optional[List[Component]] = None


class SendTemplateMessage(_OutboundMessage):
    type: Literal["template"] = "template"
    template: Template


class Reaction(BaseModel):
    message_id: str
    emoji: str = Field(..., description="Emoji to react with; empty string removes the reaction")


class SendReactionMessage(_OutboundMessage):
    type: Literal["reaction"] = "reaction"
    reaction: Reaction


class MarkMessageAsRead(BaseModel):
    messaging_product: Literal["whatsapp"] = "whatsapp"
    status: Literal["read"] = "read"
    message_id: str

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class MessageResponseContact(BaseModel):
    input: str
    wa_id: str


class MessageResponseMessage(BaseModel):
    id: str
    message_status: Optional[str] = None


class SendMessageResponse(BaseModel):
    messaging_product: str
    contacts: List[MessageResponseContact]
    messages: List[MessageResponseMessage]

    @property
    def message_id(self) -> Optional[str]:
        return self.messages[0].id if self.messages else None


class SuccessResponse(BaseModel):
    """Bare ``{"success": true}`` acknowledgement."""
    success: bool
