# Copyright (c) 2023 Javad Komijani

import torch


MAX_ITERATIONS = 30  # sweeps allowed per eigenvalue in tql2 and hqr2


class ConvergenceError(RuntimeError):
    """Raised when an iterative eigensolver exceeds its sweep cap.

    The attributes `stage`, `index` and `iterations` tell which solver gave up,
    at which eigenvalue, and after how many sweeps.
    """

    def __init__(self, stage, index, iterations):
        self.stage = stage
        self.index = index
        self.iterations = iterations
        super().__init__(
            f"{stage} did not converge for eigenvalue {index}"
            f" after {iterations} iterations"
            )


def get_machine_precision(dtype=None):
    if dtype is None:
        dtype = torch.get_default_dtype()
    return torch.finfo(dtype).eps


def get_default_tolerance(dtype=None):
    return 64 * get_machine_precision(dtype)


def eyes_like(matrix):
    eye = torch.zeros_like(matrix)
    for k in range(matrix.shape[-1]):
        eye[..., k, k] = 1
    return eye


def is_symmetric(matrix, tol=None):
    """Return True if `matrix` equals its transpose up to `tol` relative to
    its largest entry.

    A near-symmetric matrix may be classified as symmetric; the symmetric
    solver then works on the symmetrized matrix.
    """
    if tol is None:
        tol = get_default_tolerance(torch.float64)
    scale = torch.max(torch.abs(matrix))
    asym = torch.max(torch.abs(matrix - matrix.transpose(-1, -2)))
    return bool(asym <= tol * scale)


def sort_eig(eigvals, eigvecs):
    """sort eigenvalues in ascending order."""
    eigvals, sorted_ind = torch.sort(eigvals, dim=-1, stable=True)
    n = eigvecs.shape[-1]
    sorted_ind = sorted_ind.unsqueeze(-2).repeat(*[1]*(eigvecs.ndim - 2), n, 1)
    eigvecs = eigvecs.gather(-1, sorted_ind)
    return eigvals, eigvecs


def decomposition_residual(matrix, V, D, return_error_norm=True):
    """Return the errors of :math:`A V = V D` and of :math:`V^T V = I`.

    The second one is meaningful only for symmetric matrices, for which `V` is
    supposed to be orthogonal.
    """
    null_error = matrix @ V - V @ D
    orthogonal_error = V.transpose(-1, -2) @ V - eyes_like(V)
    if return_error_norm:
        null_error = torch.linalg.matrix_norm(null_error)
        orthogonal_error = torch.linalg.matrix_norm(orthogonal_error)
    return null_error, orthogonal_error
