"""
Field Embeddings
================
Each text field is embedded on its own (title, author, description) and the
vectors are stored in separate columns, so matching can weigh title and author
similarity independently.
"""

from __future__ import annotations

from sentence_transformers import SentenceTransformer

from booklist import config


class Embedder:
    """Lazily loads a Sentence Transformer model on first use."""

    def __init__(self, model_name: str = config.EMBEDDING_MODEL):
        self.model_name = model_name
        self._model: SentenceTransformer | None = None

    @property
    def model(self) -> SentenceTransformer:
        if self._model is None:
            print(f"  [*] Loading Sentence Transformer model: {self.model_name}")
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed_many(self, texts: list[str]) -> list[list[float]]:
        vectors = self.model.encode(texts, convert_to_numpy=True, normalize_embeddings=True)
        return [v.astype(float).tolist() for v in vectors]

    def embed(self, text: str) -> list[float]:
        return self.embed_many([text])[0]

    def book_embeddings(self, title: str, author: str, description: str) -> dict[str, list[float]]:
        title_vec, author_vec, description_vec = self.embed_many([title, author, description])
        return {
            "title_embedding": title_vec,
            "author_embedding": author_vec,
            "description_embedding": description_vec,
        }

    def person_embeddings(self, full_name: str, description: str) -> dict[str, list[float]]:
        return {"description_embedding": self.embed(f"{full_name}: {description}")}
