"""
Tests for booklist/embeddings.py
================================
Covers the lazy model load and the per-field embedding layout.
"""

import numpy as np
from unittest.mock import patch

from booklist.embeddings import Embedder


def _fake_encode(texts, **kwargs):
    return np.array([[float(len(t)), 0.5] for t in texts], dtype=np.float32)


class TestEmbedder:

    def test_model_loaded_once_on_first_use(self):
        with patch("booklist.embeddings.SentenceTransformer") as mock_model_cls:
            mock_model_cls.return_value.encode.side_effect = _fake_encode
            embedder = Embedder("test-model")
            mock_model_cls.assert_not_called()

            embedder.embed("Emma")
            embedder.embed("Dune")

        mock_model_cls.assert_called_once_with("test-model")

    def test_vectors_are_plain_float_lists(self):
        with patch("booklist.embeddings.SentenceTransformer") as mock_model_cls:
            mock_model_cls.return_value.encode.side_effect = _fake_encode
            vec = Embedder("test-model").embed("Emma")

        assert vec == [4.0, 0.5]
        assert all(type(v) is float for v in vec)

    def test_book_fields_embedded_separately(self):
        with patch("booklist.embeddings.SentenceTransformer") as mock_model_cls:
            mock_model_cls.return_value.encode.side_effect = _fake_encode
            result = Embedder("test-model").book_embeddings("Emma", "Jane Austen", "A novel.")

        assert result == {
            "title_embedding": [4.0, 0.5],
            "author_embedding": [11.0, 0.5],
            "description_embedding": [8.0, 0.5],
        }

    def test_person_text_includes_name(self):
        with patch("booklist.embeddings.SentenceTransformer") as mock_model_cls:
            mock_model_cls.return_value.encode.side_effect = _fake_encode
            Embedder("test-model").person_embeddings("Jane Critic", "Reviews books.")

            texts = mock_model_cls.return_value.encode.call_args.args[0]

        assert texts == ["Jane Critic: Reviews books."]
