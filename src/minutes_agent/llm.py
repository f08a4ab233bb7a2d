# llm.py
# Chat model and embeddings clients. Thin wrappers over the OpenAI SDK.

import os
from typing import Sequence

from openai import AsyncOpenAI


def truncate_at_stop(text: str, stop: Sequence[str] | None) -> str:
    """Cut `text` at the earliest occurrence of any stop sequence."""
    if not stop:
        return text
    cut = len(text)
    for sequence in stop:
        if not sequence:
            continue
        index = text.find(sequence)
        if index != -1 and index < cut:
            cut = index
    return text[:cut]


def make_client(api_key: str | None = None) -> AsyncOpenAI:
    # No retries: any model failure aborts the run.
    return AsyncOpenAI(api_key=api_key or os.getenv("OPENAI_API_KEY"), max_retries=0)


class ChatModel:
    """
    One chat-completion call per agent iteration.

    Example:
        model = ChatModel(model="gpt-4", temperature=0)
        text = await model.predict(messages, stop=["\\nObservation"])
    """

    def __init__(
        self,
        model: str = "gpt-4",
        temperature: float = 0.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self._client = client or make_client()

    async def predict(self, messages: list[dict], stop: Sequence[str] | None = None) -> str:
        kwargs = {}
        if stop:
            kwargs["stop"] = list(stop)
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            **kwargs,
        )
        return response.choices[0].message.content or ""


class OpenAIEmbeddings:
    def __init__(self, model: str = "text-embedding-ada-002", client: AsyncOpenAI | None = None) -> None:
        self.model = model
        self._client = client or make_client()

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        response = await self._client.embeddings.create(model=self.model, input=texts)
        return [list(item.embedding) for item in response.data]

    async def embed_query(self, text: str) -> list[float]:
        vectors = await self.embed_documents([text])
        return vectors[0]
