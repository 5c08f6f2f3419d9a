# Copyright (c) 2023 Javad Komijani

import math
import torch


# =============================================================================
def hessenberg_reduction(matrix):
    r"""Reduce a real square matrix to upper Hessenberg form by orthogonal
    similarity transformations (`orthes` of EISPACK/JAMA).

    For each column :math:`m - 1` a Householder reflection
    :math:`P = I - u u^T / h` is built from the entries below the subdiagonal
    and applied from both sides, :math:`H \to P H P`. A column whose entries
    below the diagonal vanish is skipped.

    The reflections are accumulated afterwards, using the entries of `H` below
    the subdiagonal as storage for the Householder vectors; these entries are
    set to zero before returning.

    Returns
    -------
    H : tensor
        upper Hessenberg matrix with :math:`H = V^T A V`.
    V : tensor
        the accumulated orthogonal transformation.
    """
    n = matrix.shape[-1]
    H = matrix.to(torch.float64).clone()
    V = torch.eye(n, dtype=torch.float64)
    ort = torch.zeros(n, dtype=torch.float64)  # working storage

    for m in range(1, n - 1):
        # Scale column
        scale = torch.sum(torch.abs(H[m:, m - 1])).item()
        if scale == 0:
            continue

        # Compute Householder transformation
        ort[m:] = H[m:, m - 1] / scale
        h = torch.dot(ort[m:], ort[m:]).item()
        g = math.sqrt(h)
        if ort[m].item() > 0:
            g = -g
        h = h - ort[m].item() * g
        ort[m] = ort[m] - g

        # Apply Householder similarity transformation
        u = ort[m:]
        H[m:, m:] -= torch.outer(u, (u @ H[m:, m:]) / h)
        H[:, m:] -= torch.outer((H[:, m:] @ u) / h, u)

        ort[m] = scale * ort[m]
        H[m, m - 1] = scale * g

    # Accumulate transformations (Algorithm 4.1 of Wilkinson & Reinsch)
    for m in range(n - 2, 0, -1):
        h_m = H[m, m - 1].item()
        if h_m != 0:
            ort[m + 1:] = H[m + 1:, m - 1]
            u = ort[m:]
            # Double division avoids possible underflow
            g = (u @ V[m:, m:]) / ort[m].item() / h_m
            V[m:, m:] += torch.outer(u, g)

    return torch.triu(H, diagonal=-1), V
