"""Linear algebra and goodness-of-fit helpers shared by every forecaster."""

import numpy as np
from typing import Sequence


def transpose(matrix: Sequence[Sequence[float]]) -> np.ndarray:
    """Transpose a dense 2-D matrix."""
    m = np.asarray(matrix, dtype=float)
    rows, cols = m.shape
    result = np.empty((cols, rows))
    for j in range(cols):
        result[j, :] = m[:, j]
    return result


def matrix_multiply(a: Sequence[Sequence[float]], b: Sequence[Sequence[float]]) -> np.ndarray:
    """Dense matrix product; shapes must be compatible."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape[1] != b.shape[0]:
        raise ValueError(f"Incompatible shapes for multiply: {a.shape} x {b.shape}")
    result = np.zeros((a.shape[0], b.shape[1]))
    for i in range(a.shape[0]):
        for j in range(b.shape[1]):
            result[i, j] = float(np.dot(a[i, :], b[:, j]))
    return result


def matrix_vector_multiply(matrix: Sequence[Sequence[float]], vector: Sequence[float]) -> np.ndarray:
    """Row-wise dot product of `matrix` with `vector`."""
    m = np.asarray(matrix, dtype=float)
    v = np.asarray(vector, dtype=float)
    if m.shape[1] != v.shape[0]:
        raise ValueError(f"Incompatible shapes for multiply: {m.shape} x {v.shape}")
    return np.array([float(np.dot(row, v)) for row in m])


def solve_linear_system(design_matrix: Sequence[Sequence[float]], target: Sequence[float]) -> np.ndarray:
    """
    Least-squares coefficients for ``X @ beta ~= y``.

    Builds the normal equations ``(X^T X) beta = X^T y`` and solves them by
    Gaussian elimination with partial pivoting: at every column the row with
    the largest absolute entry becomes the pivot row.

    Args:
        design_matrix: n x m design matrix X
        target: length-n observations y

    Returns:
        Coefficient vector beta of length m

    Raises:
        numpy.linalg.LinAlgError: if a pivot is exactly zero (singular X^T X)
    """
    X = np.asarray(design_matrix, dtype=float)
    y = np.asarray(target, dtype=float)

    XT = transpose(X)
    XTX = matrix_multiply(XT, X)
    XTy = matrix_vector_multiply(XT, y)

    n = XTX.shape[0]
    augmented = np.column_stack([XTX, XTy])

    for i in range(n):
        max_row = i + int(np.argmax(np.abs(augmented[i:, i])))
        if max_row != i:
            augmented[[i, max_row]] = augmented[[max_row, i]]

        pivot = augmented[i, i]
        if pivot == 0.0:
            raise np.linalg.LinAlgError("Singular matrix in normal equations")

        for k in range(i + 1, n):
            factor = augmented[k, i] / pivot
            augmented[k, i:] -= factor * augmented[i, i:]

    solution = np.zeros(n)
    for i in range(n - 1, -1, -1):
        residual = augmented[i, n] - np.dot(augmented[i, i + 1:n], solution[i + 1:])
        solution[i] = residual / augmented[i, i]

    return solution


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two equal-length vectors."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape:
        raise ValueError(f"Length mismatch: {a.shape} vs {b.shape}")
    return float(np.sqrt(np.sum((a - b) ** 2)))


def calculate_r2(actual: Sequence[float], predicted: Sequence[float]) -> float:
    """
    Coefficient of determination ``1 - SS_res / SS_tot``.

    Negative when the fit is worse than predicting the mean. A constant
    `actual` series has SS_tot == 0 and yields NaN (or -inf when the
    residuals are non-zero); callers treat a non-finite R^2 as no skill.
    """
    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)

    ss_res = float(np.sum((actual - predicted) ** 2))
    ss_tot = float(np.sum((actual - actual.mean()) ** 2))

    if ss_tot == 0.0:
        return float("nan") if ss_res == 0.0 else float("-inf")
    return 1.0 - ss_res / ss_tot


def calculate_rmse(actual: Sequence[float], predicted: Sequence[float]) -> float:
    """Root-mean-squared error of the residuals."""
    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)
    return float(np.sqrt(np.mean((actual - predicted) ** 2)))
