from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List


class MessageTemplate(BaseModel):
    """A message template as listed by the business account."""
    id: str
    name: str
    language: str
    status: str
    category: Optional[str] = None
    components: List[Dict[str, Any]] = Field(default_factory=list)

    class Config:
        extra = "allow"  # Graph adds fields over versions


class GetTemplatesResponse(BaseModel):
    """Response of GET /{business-account-id}/message_templates."""
    data: List[MessageTemplate]
    paging: Optional[Dict[str, Any]] = None

    @property
    def next_cursor(self) -> Optional[str]:
        if not self.paging:
            return None
        return (self.paging.get("cursors") or {}).get("after")
