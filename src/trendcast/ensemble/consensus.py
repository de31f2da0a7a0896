"""Agreement between the models' forecast paths and between symbols."""

from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np
import pandas as pd

from ..models.base_model import ModelResult

STRONG_CONSENSUS = 80.0
MODERATE_CONSENSUS = 60.0


@dataclass(frozen=True)
class Consensus:
    score: float  # Mean off-diagonal correlation x 100
    label: str  # "strong", "moderate" or "low"


def pearson_matrix(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Pearson correlation between the columns of `frame`.

    Pairs whose correlation is undefined (a flat series, no overlap) are 0;
    the diagonal is always 1.
    """
    values = frame.corr(method='pearson').fillna(0.0).to_numpy(copy=True)
    np.fill_diagonal(values, 1.0)
    return pd.DataFrame(values, index=frame.columns, columns=frame.columns)


def correlation_matrix(results: Sequence[ModelResult]) -> pd.DataFrame:
    """Pearson correlation between every pair of forecast paths."""
    frame = pd.DataFrame({r.name: np.asarray(r.predictions, dtype=float) for r in results})
    return pearson_matrix(frame)


def price_correlation_matrix(histories: Dict[str, pd.Series]) -> pd.DataFrame:
    """
    Pearson correlation between the closing prices of several symbols.

    Histories are aligned on date; each pair is correlated over the dates
    both symbols traded.
    """
    frame = pd.DataFrame(histories)
    return pearson_matrix(frame)


def consensus_score(matrix: pd.DataFrame) -> Consensus:
    """Summarize a correlation matrix as a 0-100 style agreement score."""
    n = len(matrix)
    if n < 2:
        return Consensus(score=100.0, label="strong")

    values = matrix.to_numpy(dtype=float)
    off_diagonal = values[~np.eye(n, dtype=bool)]
    score = float(off_diagonal.mean() * 100)

    if score > STRONG_CONSENSUS:
        label = "strong"
    elif score > MODERATE_CONSENSUS:
        label = "moderate"
    else:
        label = "low"
    return Consensus(score=score, label=label)
