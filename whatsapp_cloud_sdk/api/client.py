"""Main client interface for the WhatsApp Cloud SDK."""

import asyncio
import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..config.settings import ClientConfig
from ..dispatch.dispatcher import Dispatcher
from ..errors import SerializationError, ValidationError
from ..models.contacts import Contact, SendContactsMessage
from ..models.interactive import Interactive, SendInteractiveMessage
from ..models.media import RetrieveMediaUrlResponse, UploadMediaResponse
from ..models.messages import (
    Component,
    Location,
    MarkMessageAsRead,
    MediaType,
    MessageContext,
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
)
from ..models.request import ApiRequest, ApiResponse
from ..models.templates import GetTemplatesResponse
from ..reliability.rate_limiter import RateLimiter
from ..reliability.retry import RetryConfig, RetryPolicy
from ..transport.base import Transport
from ..transport.http import HttpxTransport

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class WhatsAppClient:
    """
    High-level client for the WhatsApp Cloud API.

    Each client owns its own RateLimiter unless one is passed in, so several
    configured clients can coexist in a process; pass the same limiter to
    clients that share one phone number's budget.

    Retried requests are not deduplicated: a retried send can deliver twice
    if the server accepted an attempt whose response was lost.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[Transport] = None,
        rate_limiter: Optional[RateLimiter] = None
    ):
        """
        Initialize the client.

        Args:
            config: Client configuration
            transport: Optional transport (defaults to HttpxTransport)
            rate_limiter: Optional shared rate limiter
        """
        self.config = config
        self.rate_limiter = rate_limiter or RateLimiter(config.max_requests_per_minute)
        self.retry_policy = RetryPolicy(RetryConfig.from_client_config(config))
        self.dispatcher = Dispatcher(
            transport=transport or self._build_transport(config.access_token),
            rate_limiter=self.rate_limiter,
            retry_policy=self.retry_policy,
            timeout=config.dispatch_timeout,
        )

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def _build_transport(self, access_token: str) -> Transport:
        return HttpxTransport(
            access_token=access_token,
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
        )

    def _phone_number_path(self) -> str:
        return f"/{self.config.phone_number_id}"

    def _messages_path(self) -> str:
        return f"/{self.config.phone_number_id}/messages"

    def _media_path(self) -> str:
        return f"/{self.config.phone_number_id}/media"

    def update_access_token(self, access_token: str):
        """
        Rotate the bearer token.

        The transport, its connections and the rate limiter window are kept;
        sends already in flight finish with the old token.
        """
        if not access_token:
            raise ValidationError("Missing required field: access_token")
        self.config = self.config.model_copy(update={"access_token": access_token})
        self.dispatcher.transport.set_access_token(access_token)

    async def request(self, method: str, path: str, **kwargs) -> ApiResponse:
        """Dispatch an arbitrary Graph API call relative to the versioned base URL."""
        return await self.dispatcher.send(ApiRequest.build(method, path, **kwargs))

    async def send_message(
        self,
        message: Union[BaseModel, Dict[str, Any]],
        reply_to: Optional[str] = None
    ) -> SendMessageResponse:
        """
        Send any message payload to the messages endpoint.

        Args:
            message: A message model (SendTextMessage, ...) or a raw payload dict
            reply_to: ID of an earlier message to quote this one as a reply to

        Returns:
            SendMessageResponse with the server-assigned message ID
        """
        if reply_to is not None:
            context = self._build(MessageContext, message_id=reply_to)
            if isinstance(message, BaseModel):
                message = message.model_copy(update={"context": context})
            else:
                message = {**message, "context": context.model_dump()}

        payload = message.to_payload() if isinstance(message, BaseModel) else message
        response = await self.request("POST", self._messages_path(), json_body=payload)
        return self._parse(response, SendMessageResponse)

    async def send_text(
        self,
        to: str,
        body: str,
        preview_url: bool = False,
        reply_to: Optional[str] = None
    ) -> SendMessageResponse:
        """Send a text message."""
        message = self._build(SendTextMessage.create, to=to, body=body, preview_url=preview_url)
        return await self.send_message(message, reply_to=reply_to)

    async def send_media(
        self,
        to: str,
        media_type: Union[MediaType, str],
        media_id: Optional[str] = None,
        link: Optional[str] = None,
        caption: Optional[str] = None,
        filename: Optional[str] = None,
        reply_to: Optional[str] = None
    ) -> SendMessageResponse:
        """Send an image, audio, video, document or sticker by media ID or link."""
        message = self._build(
            SendMediaMessage.create,
            to=to,
            media_type=media_type,
            media_id=media_id,
            link=link,
            caption=caption,
            filename=filename,
        )
        return await self.send_message(message, reply_to=reply_to)

    async def send_location(
        self,
        to: str,
        latitude: float,
        longitude: float,
        name: Optional[str] = None,
        address: Optional[str] = None,
        reply_to: Optional[str] = None
    ) -> SendMessageResponse:
        """Send a location pin."""
        message = self._build(
            lambda: SendLocationMessage(
                to=to,
                location=Location(latitude=latitude, longitude=longitude, name=name, address=address),
            )
        )
        return await self.send_message(message, reply_to=reply_to)

    async def send_interactive(
        self,
        to: str,
        interactive: Union[Interactive, Dict[str, Any]],
        reply_to: Optional[str] = None
    ) -> SendMessageResponse:
        """
        Send an interactive message (reply buttons, list, CTA URL, flow,
        location or address request).

        Use the ``SendInteractiveMessage.create_*`` constructors with
        ``send_message`` for the common shapes.
        """
        message = self._build(lambda: SendInteractiveMessage(to=to, interactive=interactive))
        return await self.send_message(message, reply_to=reply_to)

    async def send_contacts(
        self,
        to: str,
        contacts: List[Union[Contact, Dict[str, Any]]],
        reply_to: Optional[str] = None
    ) -> SendMessageResponse:
        """Send one or more contact cards."""
        message = self._build(lambda: SendContactsMessage(to=to, contacts=contacts))
        return await self.send_message(message, reply_to=reply_to)

    async def send_template(
        self,
        to: str,
        template_name: str,
        language_code: str = "en_US",
        components: Optional[List[Union[Component, Dict[str, Any]]]] = None,
        reply_to: Optional[str] = None
    ) -> SendMessageResponse:
        """Send an approved message template."""
        message = self._build(
            lambda: SendTemplateMessage(
                to=to,
                template=Template(
                    name=template_name,
                    language=TemplateLanguage(code=language_code),
                    components=components,
                ),
            )
        )
        return await self.send_message(message, reply_to=reply_to)

    async def send_reaction(self, to: str, message_id: str, emoji: str) -> SendMessageResponse:
        """React to a message; an empty emoji removes the reaction."""
        message = self._build(
            lambda: SendReactionMessage(to=to, reaction=Reaction(message_id=message_id, emoji=emoji))
        )
        return await self.send_message(message)

    async def mark_as_read(self, message_id: str) -> SuccessResponse:
        """Mark an incoming message as read."""
        payload = self._build(MarkMessageAsRead, message_id=message_id).to_payload()
        response = await self.request("POST", self._messages_path(), json_body=payload)
        return self._parse(response, SuccessResponse)

    async def upload_media(
        self,
        file_path: Union[str, Path],
        mime_type: Optional[str] = None
    ) -> UploadMediaResponse:
        """
        Upload a local file and return its media ID.

        Args:
            file_path: Path of the file to upload
            mime_type: MIME type; guessed from the file name when omitted
        """
        path = Path(file_path)
        if not path.is_file():
            raise ValidationError(f"Media file not found: {path}")

        mime_type = mime_type or mimetypes.guess_type(path.name)[0]
        if not mime_type:
            raise ValidationError(f"Cannot determine MIME type of {path.name}; pass mime_type")

        content = await asyncio.to_thread(path.read_bytes)
        response = await self.request(
            "POST",
            self._media_path(),
            data={"messaging_product": "whatsapp", "type": mime_type},
            files={"file": (path.name, content, mime_type)},
        )
        return self._parse(response, UploadMediaResponse)

    async def retrieve_media_url(self, media_id: str) -> RetrieveMediaUrlResponse:
        """Get the temporary download URL of an uploaded media object."""
        response = await self.request("GET", f"/{media_id}")
        return self._parse(response, RetrieveMediaUrlResponse)

    async def delete_media(self, media_id: str) -> SuccessResponse:
        """Delete an uploaded media object."""
        response = await self.request("DELETE", f"/{media_id}")
        return self._parse(response, SuccessResponse)

    async def get_templates(self, limit: Optional[int] = None, after: Optional[str] = None) -> GetTemplatesResponse:
        """List message templates of the business account."""
        if not self.config.business_account_id:
            raise ValidationError("Missing required field: business_account_id")

        params: Dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if after is not None:
            params["after"] = after

        response = await self.request(
            "GET",
            f"/{self.config.business_account_id}/message_templates",
            params=params or None,
        )
        return self._parse(response, GetTemplatesResponse)

    async def get_phone_number(self, fields: Optional[List[str]] = None) -> Dict[str, Any]:
        """Fetch details of the sender phone number."""
        params = {"fields": ",".join(fields)} if fields else None
        response = await self.request("GET", self._phone_number_path(), params=params)
        return response.data

    async def aclose(self):
        """Close the underlying transport."""
        await self.dispatcher.transport.aclose()

    async def __aenter__(self) -> "WhatsAppClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    @staticmethod
    def _build(factory, *args, **kwargs):
        """Build a payload model, mapping pydantic errors to the SDK ValidationError."""
        try:
            return factory(*args, **kwargs)
        except ValueError as e:
            # pydantic.ValidationError is a ValueError subclass
            raise ValidationError(f"Invalid payload: {e}") from e

    @staticmethod
    def _parse(response: ApiResponse, model: Type[ResponseT]) -> ResponseT:
        try:
            return model.model_validate(response.data)
        except PydanticValidationError as e:
            raise SerializationError(
                f"Unexpected {model.__name__} shape: {e}",
                status_code=response.status_code,
                attempts=response.attempts,
            ) from e


# Convenience factory for quick usage
def create_client(
    access_token: str,
    phone_number_id: str,
    version: Optional[str] = None
) -> WhatsAppClient:
    """Create a client with default dispatch settings."""
    config = ClientConfig(
        access_token=access_token,
        phone_number_id=phone_number_id,
        **({"version": version} if version else {}),
    )
    return WhatsAppClient(config)
