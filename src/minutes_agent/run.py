# run.py
# Entry point. Config and wiring only; no logic lives here.
#
# Every tunable lives on RunConfig; construct one explicitly to override
# the defaults. The API key is read from the environment (.env supported).

import asyncio

import httpx
from dotenv import load_dotenv
from openai import AsyncOpenAI

from minutes_agent import display
from minutes_agent.executor import AgentExecutor, SingleActionAgent
from minutes_agent.llm import ChatModel, OpenAIEmbeddings, make_client
from minutes_agent.models import RunConfig
from minutes_agent.parser import TaskOutputParser
from minutes_agent.prompt import TaskPromptTemplate
from minutes_agent.retrieval import InMemoryVectorStore, RetrievalQAChain, make_text_splitter
from minutes_agent.tools import load_document, make_email_tool, make_meeting_qa_tool


def make_http_client(config: RunConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=config.http_timeout)


async def build_executor(
    config: RunConfig,
    openai_client: AsyncOpenAI,
    http_client: httpx.AsyncClient,
) -> AgentExecutor:
    """Load and index the minutes, then wire both tools into an executor."""
    model = ChatModel(config.model_name, config.temperature, client=openai_client)

    document = await load_document(config.document_path, config.unstructured_api_url, http_client)
    splitter = make_text_splitter(config.chunk_size, config.chunk_overlap)
    chunks = splitter.split_documents([document])
    if config.verbose:
        display.document_split(config.document_path, chunks)

    embeddings = OpenAIEmbeddings(config.embedding_model, client=openai_client)
    store = await InMemoryVectorStore.from_documents(chunks, embeddings)
    chain = RetrievalQAChain.from_llm(model, store.as_retriever(config.retriever_k))

    tools = [
        make_meeting_qa_tool(chain),
        make_email_tool(config.email_function_url, http_client),
    ]
    if config.verbose:
        display.tools_registered(tools)

    agent = SingleActionAgent(
        llm=model,
        prompt=TaskPromptTemplate(tools, input_variables=["input", "agent_scratchpad"]),
        output_parser=TaskOutputParser(),
        stop=config.stop,
    )
    return AgentExecutor(
        agent,
        tools,
        max_iterations=config.max_iterations,
        verbose=config.verbose,
    )


async def run(config: RunConfig | None = None) -> str:
    """Execute the configured task end to end and print its summary."""
    load_dotenv()
    config = config or RunConfig()

    display.banner(config.model_name, config.document_path)

    try:
        openai_client = make_client(config.openai_api_key)
        try:
            async with make_http_client(config) as http_client:
                executor = await build_executor(config, openai_client, http_client)
                display.task_received(config.task)
                result = await executor.call({"input": config.task})
        finally:
            await openai_client.close()
    except Exception as exc:
        display.halt(f"{type(exc).__name__}: {exc}")
        raise

    output = result["output"]
    display.final_result(output)
    print(f"Got output: {output}")
    return output


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
