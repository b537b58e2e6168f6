"""Request and response shapes for the WhatsApp Cloud API."""

from .request import ApiRequest, ApiResponse
from .messages import (
    Component,
    Location,
    MarkMessageAsRead,
    MediaObject,
    MediaType,
    MessageContext,
    Parameter,
    Reaction,
    SendLocationMessage,
    SendMediaMessage,
    SendMessageResponse,
    SendReactionMessage,
    SendTemplateMessage,
    SendTextMessage,
    SuccessResponse,
    Template,
    TemplateLanguage,
    TextBody,
)
from .interactive import (
    Interactive,
    InteractiveAction,
    InteractiveButton,
    InteractiveHeader,
    InteractiveText,
    InteractiveType,
    ReplyButton,
    Section,
    SectionRow,
    SendInteractiveMessage,
)
from .contacts import (
    Contact,
    ContactAddress,
    ContactEmail,
    ContactName,
    ContactOrg,
    ContactPhone,
    ContactUrl,
    SendContactsMessage,
)
from .media import RetrieveMediaUrlResponse, UploadMediaResponse
from .templates import GetTemplatesResponse, MessageTemplate

__all__ = [
    "ApiRequest",
    "ApiResponse",
    "Component",
    "Location",
    "MarkMessageAsRead",
    "MediaObject",
    "MediaType",
    "MessageContext",
    "Parameter",
    "Reaction",
    "SendLocationMessage",
    "SendMediaMessage",
    "SendMessageResponse",
    "SendReactionMessage",
    "SendTemplateMessage",
    "SendTextMessage",
    "SuccessResponse",
    "Template",
    "TemplateLanguage",
    "TextBody",
    "Interactive",
    "InteractiveAction",
    "InteractiveButton",
    "InteractiveHeader",
    "InteractiveText",
    "InteractiveType",
    "ReplyButton",
    "Section",
    "SectionRow",
    "SendInteractiveMessage",
    "Contact",
    "ContactAddress",
    "ContactEmail",
    "ContactName",
    "ContactOrg",
    "ContactPhone",
    "ContactUrl",
    "SendContactsMessage",
    "RetrieveMediaUrlResponse",
    "UploadMediaResponse",
    "GetTemplatesResponse",
    "MessageTemplate",
]
