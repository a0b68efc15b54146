# ai2sql/services/example_search.py
# Semantic lookup of stored SQL examples by their natural-language side
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
from fastapi import HTTPException, status
from sentence_transformers import SentenceTransformer

from ai2sql.config import EMBEDDING_MODEL_NAME

logger = logging.getLogger(__name__)

# Loaded on first search
_embedding_model: Optional[SentenceTransformer] = None


def _get_embedding_model() -> SentenceTransformer:
    global _embedding_model
    if _embedding_model is None:
        logger.info(f"Loading embedding model {EMBEDDING_MODEL_NAME}")
        try:
            _embedding_model = SentenceTransformer(EMBEDDING_MODEL_NAME)
        except Exception as e:
            logger.error(f"Failed to load embedding model '{EMBEDDING_MODEL_NAME}': {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Example search is unavailable: the embedding model could not be loaded",
            )
    return _embedding_model


def embed_texts(texts: List[str]) -> np.ndarray:
    """Unit-length embeddings, one row per text."""
    vectors = _get_embedding_model().encode(texts, convert_to_numpy=True, show_progress_bar=False)
    vectors = np.atleast_2d(np.asarray(vectors, dtype=np.float32))
    norms = np.linalg.norm(vectors, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return vectors / norms


def find_similar_examples(query: str, examples: Sequence, threshold: float, limit: int) -> List[Tuple[object, float]]:
    """
    Rank examples by cosine similarity between ``query`` and their
    natural-language side. Keeps scores >= threshold, best first, at most
    ``limit`` results.
    """
    if not examples or limit <= 0:
        return []
    vectors = embed_texts([query] + [ex.natural_language_query for ex in examples])
    scores = vectors[1:] @ vectors[0]
    ranked = sorted(zip(examples, scores.tolist()), key=lambda pair: pair[1], reverse=True)
    return [(ex, round(score, 4)) for ex, score in ranked if score >= threshold][:limit]
