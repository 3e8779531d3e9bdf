# Embedding quality measures used to compare the techniques
import numpy as np
import pandas as pd
from scipy.spatial.distance import pdist
from scipy.stats import spearmanr
from sklearn.manifold import trustworthiness

try:
    from .config import *
except ImportError:
    from config import *

def embedding_quality(X_high, X_low, n_neighbors: int = TRUST_NEIGHBORS) -> dict:
    """
    Neighbourhood preservation of a low-dimensional embedding.

    Args:
        X_high: Input matrix the embedding was computed from
        X_low: Embedding coordinates
        n_neighbors: Neighbourhood size for trustworthiness/continuity

    Returns:
        Dict with 'trustworthiness' (are embedded neighbours true neighbours?),
        'continuity' (are true neighbours kept close?) and 'distance_spearman'
        (rank correlation of all pairwise distances, a global-structure check)
    """
    X_high = np.asarray(X_high, dtype=float)
    X_low = np.asarray(X_low, dtype=float)
    k = min(n_neighbors, max(1, len(X_high) // 2 - 1))

    rho, _ = spearmanr(pdist(X_high), pdist(X_low))
    return {
        "trustworthiness": float(trustworthiness(X_high, X_low, n_neighbors=k)),
        "continuity": float(trustworthiness(X_low, X_high, n_neighbors=k)),
        "distance_spearman": float(rho),
    }

def quality_table(X_high, embeddings: dict, n_neighbors: int = TRUST_NEIGHBORS) -> pd.DataFrame:
    """embedding_quality for several named embeddings of the same input."""
    rows = []
    for name, emb in embeddings.items():
        rec = {"embedding": name}
        rec.update(embedding_quality(X_high, emb, n_neighbors))
        rows.append(rec)
    return pd.DataFrame(rows)
