# models.py
# Data contracts for the meeting-minutes task agent.
# No business logic lives here, only schema and validation.

from typing import Any, Callable, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Tool(BaseModel):
    """A named, described capability the agent may invoke with one string."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, description="Unique within a run.")
    description: str = Field(..., description="Free text shown to the model.")
    func: Callable[[str], Any] = Field(
        ..., exclude=True, description="str -> str, sync or async."
    )


class AgentAction(BaseModel):
    """A parsed tool call."""

    tool: str
    tool_input: str
    log: str = Field(..., description="Raw model text that led to this action.")


class AgentFinish(BaseModel):
    """A parsed final answer. The summary lives under return_values['output']."""

    return_values: dict[str, Any]
    log: str


class AgentStep(BaseModel):
    """One (action, observation) pair in the scratchpad."""

    action: AgentAction
    observation: str


ParseResult = Union[AgentAction, AgentFinish]


class RunConfig(BaseModel):
    """Everything the task run needs, passed explicitly to run()."""

    model_config = ConfigDict(protected_namespaces=())

    openai_api_key: str | None = Field(default=None, description="Falls back to OPENAI_API_KEY.")
    model_name: str = "gpt-4"
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    embedding_model: str = "text-embedding-ada-002"

    stop: list[str] = Field(default_factory=lambda: ["\nObservation"])
    max_iterations: int | None = Field(default=15, ge=1)
    verbose: bool = Field(default=True, description="Emit per-step trace output.")

    document_path: str = "minutes.pdf"
    unstructured_api_url: str = "http://localhost:8001/general/v0/general"
    chunk_size: int = Field(default=750, gt=0)
    chunk_overlap: int = Field(default=250, ge=0)
    retriever_k: int = Field(default=4, ge=1)

    email_function_url: str = "http://localhost:9000/SendEmailViaSES"
    http_timeout: float = Field(default=30.0, gt=0)

    task: str = (
        "Read the meetings notes from the most recent meeting at Wigit, LLC. "
        "Email any follow up items to the parties involved."
    )

    @model_validator(mode="after")
    def _overlap_smaller_than_chunk(self) -> "RunConfig":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self
