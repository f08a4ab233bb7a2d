# tools.py
# Tool factories and the document loader.
# The executor only sees Tool objects; it never calls these helpers directly.

from pathlib import Path

import httpx
from langchain_core.documents import Document

from minutes_agent.models import Tool
from minutes_agent.retrieval import RetrievalQAChain

MEETING_QA_TOOL = "meeting-information-QA-utilty"
EMAIL_TOOL = "email-sender"

MEETING_QA_DESCRIPTION = (
    "answers questions about the meeting minutes for the most recent meeting at Wigit, LLC"
)
EMAIL_DESCRIPTION = (
    "Sends an email to a single specified email address. "
    "Accepts a JSON string with the following keys: to, subject, and body"
)


# ---------------------------------------------------------------------------
# Document loading
# ---------------------------------------------------------------------------


async def load_document(
    path: str | Path,
    api_url: str,
    client: httpx.AsyncClient,
) -> Document:
    """
    Partition `path` with an Unstructured API endpoint and join the element
    texts into one Document, blank line between elements.
    """
    path = Path(path)
    with path.open("rb") as fh:
        response = await client.post(
            api_url,
            files={"files": (path.name, fh.read())},
            headers={"accept": "application/json"},
        )
    response.raise_for_status()

    elements = response.json()
    texts = [el["text"] for el in elements if isinstance(el, dict) and el.get("text")]
    return Document(page_content="\n\n".join(texts), metadata={"source": str(path)})


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


def make_meeting_qa_tool(chain: RetrievalQAChain) -> Tool:
    async def _answer(question: str) -> str:
        return await chain.run(question)

    return Tool(name=MEETING_QA_TOOL, description=MEETING_QA_DESCRIPTION, func=_answer)


def make_email_tool(function_url: str, client: httpx.AsyncClient) -> Tool:
    """
    The tool input is forwarded untouched as the request body; the function
    is expected to read `to`, `subject` and `body` from it.
    """

    async def _send(payload: str) -> str:
        response = await client.post(
            function_url,
            content=payload.encode("utf-8"),
            headers={"content-type": "application/json"},
        )
        response.raise_for_status()
        return response.text

    return Tool(name=EMAIL_TOOL, description=EMAIL_DESCRIPTION, func=_send)
