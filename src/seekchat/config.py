from pydantic import BaseModel, Field

from seekchat.request import Model, ResponseFormat, Thinking


class ChatConfig(BaseModel):
    """Request settings passed through unchanged on every round.

    Args:
        model: Which DeepSeek model to use.
        thinking: Explicitly enable or disable thinking mode.
        response_format: ``text`` (default) or ``json_object``.
        temperature: Sampling temperature. Alter this or ``top_p``,
            not both.
        top_p: Nucleus sampling mass.
        frequency_penalty: Penalise tokens by how often they occurred.
        presence_penalty: Penalise tokens that occurred at all.
        max_tokens: Cap on generated tokens per round.
    """

    model: Model = Model.DEEPSEEK_CHAT
    thinking: Thinking | None = None
    response_format: ResponseFormat = Field(default_factory=ResponseFormat)
    temperature: float | None = Field(default=None, ge=0, le=2)
    top_p: float | None = Field(default=None, gt=0, le=1)
    frequency_penalty: float | None = Field(default=None, ge=-2, le=2)
    presence_penalty: float | None = Field(default=None, ge=-2, le=2)
    max_tokens: int | None = Field(default=None, ge=1)
