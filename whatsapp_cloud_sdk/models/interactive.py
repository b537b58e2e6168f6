"""
Interactive message payloads: reply buttons, list menus, call-to-action
URLs, flows, location requests and address requests.

Each kind is ``{"type": "interactive", "interactive": {...}}`` on the wire.
The ``create_*`` constructors build the common shapes; anything else can be
assembled from ``Interactive`` directly.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, model_validator

from .messages import MediaObject, _OutboundMessage

FLOW_MESSAGE_VERSION = "3"


class InteractiveType(str, Enum):
    BUTTON = "button"
    LIST = "list"
    PRODUCT = "product"
    PRODUCT_LIST = "product_list"
    FLOW = "flow"
    CTA_URL = "cta_url"
    LOCATION_REQUEST = "location_request_message"
    ADDRESS = "address_message"


class InteractiveText(BaseModel):
    """Body or footer text."""
    text: str = Field(..., min_length=1)


class InteractiveHeader(BaseModel):
    """Header; only the slot matching ``type`` is set."""
    type: Literal["text", "image", "video", "document"]
    text: Optional[str] = None
    image: Optional[MediaObject] = None
    video: Optional[MediaObject] = None
    document: Optional[MediaObject] = None

    @model_validator(mode="after")
    def check_slot(self):
        if getattr(self, self.type) is None:
            raise ValueError(f"header of type '{self.type}' needs '{self.type}' set")
        return self


class ReplyButton(BaseModel):
    id: str = Field(..., min_length=1, max_length=256)
    title: str = Field(..., min_length=1, max_length=20)


class InteractiveButton(BaseModel):
    type: Literal["reply"] = "reply"
    reply: ReplyButton


class SectionRow(BaseModel):
    id: str = Field(..., min_length=1, max_length=200)
    title: str = Field(..., min_length=1, max_length=24)
    description: Optional[str] = Field(None, max_length=72)


class Section(BaseModel):
    title: Optional[str] = Field(None, max_length=24)
    rows: List[SectionRow] = Field(..., min_length=1, max_length=10)


class InteractiveAction(BaseModel):
    """
    The ``action`` object. Which fields apply depends on the message type:
    ``buttons`` for reply buttons, ``button`` + ``sections`` for lists,
    ``name`` + ``parameters`` for cta_url, flow, location and address
    requests, ``catalog_id`` + product fields for product messages.
    """
    buttons: Optional[List[InteractiveButton]] = None
    button: Optional[str] = Field(None, max_length=20)
    sections: Optional[List[Section]] = None
    name: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    catalog_id: Optional[str] = None
    product_retailer_id: Optional[str] = None


class Interactive(BaseModel):
    type: InteractiveType
    header: Optional[InteractiveHeader] = None
    body: Optional[InteractiveText] = None
    footer: Optional[InteractiveText] = None
    action: InteractiveAction

    @model_validator(mode="after")
    def check_action(self):
        action = self.action
        if self.type is not InteractiveType.PRODUCT and self.body is None:
            raise ValueError(f"'{self.type.value}' messages need a body")

        if self.type is InteractiveType.BUTTON:
            if not action.buttons or len(action.buttons) > 3:
                raise ValueError("button messages need 1 to 3 reply buttons")
        elif self.type is InteractiveType.LIST:
            if not action.button or not action.sections:
                raise ValueError("list messages need a menu button label and at least one section")
            if sum(len(section.rows) for section in action.sections) > 10:
                raise ValueError("list messages allow at most 10 rows in total")
        elif self.type in (InteractiveType.PRODUCT, InteractiveType.PRODUCT_LIST):
            if not action.catalog_id:
                raise ValueError(f"'{self.type.value}' messages need a catalog_id")
        elif self.type is InteractiveType.LOCATION_REQUEST:
            if action.name != "send_location":
                raise ValueError("location request messages need action name 'send_location'")
        elif not action.name or action.parameters is None:
            raise ValueError(f"'{self.type.value}' messages need action name and parameters")
        return self


def _text(value: Optional[str]) -> Optional[InteractiveText]:
    return InteractiveText(text=value) if value else None


class SendInteractiveMessage(_OutboundMessage):
    type: Literal["interactive"] = "interactive"
    interactive: Interactive

    @classmethod
    def create_buttons(
        cls,
        to: str,
        body: str,
        buttons: Sequence[Tuple[str, str]],
        header: Optional[InteractiveHeader] = None,
        footer: Optional[str] = None
    ) -> "SendInteractiveMessage":
        """Reply buttons from ``(id, title)`` pairs."""
        return cls(to=to, interactive=Interactive(
            type=InteractiveType.BUTTON,
            header=header,
            body=InteractiveText(text=body),
            footer=_text(footer),
            action=InteractiveAction(buttons=[
                InteractiveButton(reply=ReplyButton(id=button_id, title=title))
                for button_id, title in buttons
            ]),
        ))

    @classmethod
    def create_list(
        cls,
        to: str,
        body: str,
        button: str,
        sections: Sequence[Section],
        header: Optional[str] = None,
        footer: Optional[str] = None
    ) -> "SendInteractiveMessage":
        """List menu opened by ``button``."""
        return cls(to=to, interactive=Interactive(
            type=InteractiveType.LIST,
            header=InteractiveHeader(type="text", text=header) if header else None,
            body=InteractiveText(text=body),
            footer=_text(footer),
            action=InteractiveAction(button=button, sections=list(sections)),
        ))

    @classmethod
    def create_cta_url(
        cls,
        to: str,
        body: str,
        display_text: str,
        url: str,
        header: Optional[str] = None,
        footer: Optional[str] = None
    ) -> "SendInteractiveMessage":
        """A single button opening ``url``."""
        return cls(to=to, interactive=Interactive(
            type=InteractiveType.CTA_URL,
            header=InteractiveHeader(type="text", text=header) if header else None,
            body=InteractiveText(text=body),
            footer=_text(footer),
            action=InteractiveAction(
                name="cta_url",
                parameters={"display_text": display_text, "url": url},
            ),
        ))

    @classmethod
    def create_flow(
        cls,
        to: str,
        body: str,
        flow_id: str,
        flow_cta: str,
        flow_token: Optional[str] = None,
        screen: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        header: Optional[str] = None,
        footer: Optional[str] = None
    ) -> "SendInteractiveMessage":
        """Open a published flow, optionally on a given screen with initial data."""
        parameters: Dict[str, Any] = {
            "flow_message_version": FLOW_MESSAGE_VERSION,
            "flow_id": flow_id,
            "flow_cta": flow_cta,
            "flow_action": "navigate",
        }
        if flow_token:
            parameters["flow_token"] = flow_token
        if screen:
            payload: Dict[str, Any] = {"screen": screen}
            if data:
                payload["data"] = data
            parameters["flow_action_payload"] = payload

        return cls(to=to, interactive=Interactive(
            type=InteractiveType.FLOW,
            header=InteractiveHeader(type="text", text=header) if header else None,
            body=InteractiveText(text=body),
            footer=_text(footer),
            action=InteractiveAction(name="flow", parameters=parameters),
        ))

    @classmethod
    def create_location_request(cls, to: str, body: str) -> "SendInteractiveMessage":
        """Ask the recipient to share their location."""
        return cls(to=to, interactive=Interactive(
            type=InteractiveType.LOCATION_REQUEST,
            body=InteractiveText(text=body),
            action=InteractiveAction(name="send_location"),
        ))

    @classmethod
    def create_address_request(
        cls,
        to: str,
        body: str,
        country: str,
        values: Optional[Dict[str, Any]] = None
    ) -> "SendInteractiveMessage":
        """Ask the recipient for a delivery address, optionally prefilled."""
        parameters: Dict[str, Any] = {"country": country}
        if values:
            parameters["values"] = values
        return cls(to=to, interactive=Interactive(
            type=InteractiveType.ADDRESS,
            body=InteractiveText(text=body),
            action=InteractiveAction(name="address_message", parameters=parameters),
        ))
