# retrieval.py
# Question answering over a single document: split, embed, retrieve, stuff.
#
# The vector store is in-memory and rebuilt per run.

from typing import Sequence

import numpy as np
from langchain_core.documents import Document
from langchain_text_splitters import CharacterTextSplitter

from minutes_agent.llm import ChatModel, OpenAIEmbeddings
from minutes_agent.prompt import render_template

QA_PROMPT = """\
Use the following pieces of context to answer the question at the end. \
If you don't know the answer, just say that you don't know, don't try to make up an answer.

{context}

Question: {question}
Helpful Answer:\
"""


# ---------------------------------------------------------------------------
# Splitting
# ---------------------------------------------------------------------------


def make_text_splitter(chunk_size: int = 750, chunk_overlap: int = 250) -> CharacterTextSplitter:
    """Paragraph splitter: pieces on blank lines, merged up to `chunk_size` characters."""
    return CharacterTextSplitter(separator="\n\n", chunk_size=chunk_size, chunk_overlap=chunk_overlap)


# ---------------------------------------------------------------------------
# Vector store
# ---------------------------------------------------------------------------


class InMemoryVectorStore:
    """Cosine-similarity search over a dense matrix of document embeddings."""

    def __init__(self, embeddings: OpenAIEmbeddings) -> None:
        self.embeddings = embeddings
        self.documents: list[Document] = []
        self._vectors = np.empty((0, 0), dtype=float)

    @classmethod
    async def from_documents(
        cls, documents: Sequence[Document], embeddings: OpenAIEmbeddings
    ) -> "InMemoryVectorStore":
        store = cls(embeddings)
        await store.add_documents(documents)
        return store

    async def add_documents(self, documents: Sequence[Document]) -> None:
        if not documents:
            return
        vectors = await self.embeddings.embed_documents([d.page_content for d in documents])
        if len(vectors) != len(documents):
            raise ValueError("Number of embeddings must match number of documents")
        matrix = np.asarray(vectors, dtype=float)
        self._vectors = matrix if self._vectors.size == 0 else np.vstack([self._vectors, matrix])
        self.documents.extend(documents)

    def search_by_vector(self, query_vector: Sequence[float], k: int = 4) -> list[tuple[Document, float]]:
        if not self.documents:
            return []
        query = np.asarray(query_vector, dtype=float)
        norms = np.linalg.norm(self._vectors, axis=1) * np.linalg.norm(query)
        dots = self._vectors @ query
        scores = np.divide(dots, norms, out=np.zeros_like(dots), where=norms != 0)
        # Stable sort keeps insertion order among equal scores.
        order = np.argsort(-scores, kind="stable")[:k]
        return [(self.documents[i], float(scores[i])) for i in order]

    async def similarity_search(self, query: str, k: int = 4) -> list[Document]:
        query_vector = await self.embeddings.embed_query(query)
        return [doc for doc, _score in self.search_by_vector(query_vector, k)]

    def as_retriever(self, k: int = 4) -> "VectorStoreRetriever":
        return VectorStoreRetriever(self, k)


class VectorStoreRetriever:
    def __init__(self, store: InMemoryVectorStore, k: int = 4) -> None:
        self.store = store
        self.k = k

    async def get_relevant_documents(self, query: str) -> list[Document]:
        return await self.store.similarity_search(query, self.k)


# ---------------------------------------------------------------------------
# QA chain
# ---------------------------------------------------------------------------


class RetrievalQAChain:
    """Retrieve the top documents and stuff them into a single QA prompt."""

    def __init__(self, llm: ChatModel, retriever: VectorStoreRetriever) -> None:
        self.llm = llm
        self.retriever = retriever

    @classmethod
    def from_llm(cls, llm: ChatModel, retriever: VectorStoreRetriever) -> "RetrievalQAChain":
        return cls(llm, retriever)

    def build_prompt(self, question: str, documents: Sequence[Document]) -> str:
        context = "\n\n".join(doc.page_content for doc in documents)
        return render_template(QA_PROMPT, {"context": context, "question": question})

    async def run(self, question: str) -> str:
        documents = await self.retriever.get_relevant_documents(question)
        prompt = self.build_prompt(question, documents)
        answer = await self.llm.predict([{"role": "user", "content": prompt}])
        return answer.strip()
