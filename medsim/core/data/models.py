"""MedSim Data Models"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

LLMProviderType = Literal["ollama"]

LLMPromptType = Literal[
    "patient_generation",
    "patient_persona_generation",
    "chat_response",
    "examination_finding",
    "test_result_generation",
    "clinical_update",
]


class LLMRequest(BaseModel):
    """LLM Request Model
    - LLM requests are normalized to this internal representation to facilitate multiple providers
    - accepts camelCase keys (systemPrompt, userPrompt, maxTokens) from API clients
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: LLMPromptType  # simulation task this request serves
    system_prompt: str | None = None
    user_prompt: str = Field(min_length=1)
    temperature: float | None = Field(default=None, ge=0, le=2)
    max_tokens: int | None = Field(default=None, gt=0)
    model: str | None = None  # model to use for the request

    def to_messages(self) -> list[dict[str, str]]:
        """Provider chat messages for this request"""
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": self.user_prompt})
        return messages


class LLMUsage(BaseModel):
    """Token accounting reported by the provider"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class LLMResponse(BaseModel):
    """LLM Response Model
    - LLM responses are normalized to this internal representation to facilitate multiple providers
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: str = ""  # the text output from the model
    usage: LLMUsage | None = None
    model: str | None = None
    success: bool = True  # whether the request was successful
    provider: LLMProviderType | None = None
    metadata: dict | None = None  # provider specific metadata


class LLMCompletionResponse(LLMResponse):
    """LLM response as returned by the API, with disclaimer and audit fields"""

    disclaimer: str
    timestamp: str
    request_type: LLMPromptType
