"""Generation results and shaped reply models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from leadsync.schemas.context_schema import Context
from leadsync.utils import snake_label


class Urgency(str, Enum):
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class NextAction(str, Enum):
    WAIT_FOR_RESPONSE = "wait_for_response"
    CONTINUE_CONVERSATION = "continue_conversation"


class Button(BaseModel):
    """A call-to-action affordance. Built only by the response shaper."""

    label: str
    id: str

    @classmethod
    def from_label(cls, label: str, position: int = 1) -> "Button":
        return cls(label=label, id=f"btn_{position}_{snake_label(label)}")


class ConversationTurn(BaseModel):
    role: str
    content: str


class GenerationResult(BaseModel):
    """Text and accounting returned by a generation backend."""

    text: str
    output_tokens: int = 0
    elapsed_ms: int = 0


class ShapedResponse(BaseModel):
    text: str
    buttons: list[Button] = Field(default_factory=list)
    urgency: Urgency = Urgency.NORMAL
    next_action: NextAction = NextAction.CONTINUE_CONVERSATION
    matched_rule: Optional[str] = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def response_type(self) -> str:
        return "text_with_buttons" if self.buttons else "text_only"

    @property
    def button_labels(self) -> list[str]:
        return [b.label for b in self.buttons]


class ReplyResult(BaseModel):
    """Everything the transport layer needs after one inbound message."""

    lead_id: str
    is_new_user: bool
    context: Context
    response: ShapedResponse
    tokens_used: int = 0
    response_time_ms: int = 0
