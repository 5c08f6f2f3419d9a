# Copyright (c) 2023 Javad Komijani

r"""
Eigenvalues and eigenvectors of real symmetric matrices in two stages:

1.  Householder reduction to a symmetric tridiagonal matrix (`tred2`),

2.  the QL algorithm with implicit shifts on the tridiagonal matrix (`tql2`).

Both stages are adapted from the JAMA/TNT versions of the EISPACK routines
described in

    Wilkinson, J. H., & Reinsch, C. (1971). Handbook for Automatic
    Computation: Volume II: Linear Algebra. Springer-Verlag.

The orthogonal transformation of the first stage is accumulated in `V`, which
is then updated in place by the second stage so that on exit its columns are
the eigenvectors.
"""

import math
import torch

from .generic import MAX_ITERATIONS, ConvergenceError
from .generic import get_machine_precision, sort_eig


# =============================================================================
def tridiagonalize(matrix):
    r"""Reduce a real symmetric matrix to tridiagonal form.

    Only the lower triangle of `matrix` is referenced. The rows are processed
    from the last one backwards; a row whose leading part vanishes is left as
    it is (identity step) instead of building a reflection from a zero vector.

    Returns
    -------
    d : tensor
        the diagonal of the tridiagonal matrix.
    e : tensor
        the subdiagonal; `e[i]` couples rows `i-1` and `i` and `e[0] = 0`.
    V : tensor
        the orthogonal transformation, i.e. :math:`V^T A V` is tridiagonal.
    """
    n = matrix.shape[-1]
    V = matrix.to(torch.float64).clone()
    d = V[n - 1].clone()
    e = torch.zeros(n, dtype=torch.float64)

    for i in range(n - 1, 0, -1):
        # Scale to avoid under/overflow
        scale = torch.sum(torch.abs(d[:i])).item()
        h = 0.

        if scale == 0:
            e[i] = d[i - 1]
            d[:i] = V[i - 1, :i]
            V[i, :i] = 0
            V[:i, i] = 0
        else:
            # Generate Householder vector
            d[:i] /= scale
            h = torch.dot(d[:i], d[:i]).item()
            f = d[i - 1].item()
            g = math.sqrt(h)
            if f > 0:
                g = -g
            e[i] = scale * g
            h = h - f * g
            d[i - 1] = f - g

            # Apply similarity transformation to remaining columns; the
            # symmetric block is stored in the lower triangle of V[:i, :i]
            low = torch.tril(V[:i, :i])
            V[:i, i] = d[:i]
            e[:i] = (low + low.T - torch.diag(torch.diagonal(low))) @ d[:i]
            e[:i] /= h
            f = torch.dot(e[:i], d[:i]).item()
            hh = f / (h + h)
            e[:i] -= hh * d[:i]
            V[:i, :i] -= torch.tril(
                    torch.outer(e[:i], d[:i]) + torch.outer(d[:i], e[:i])
                    )
            d[:i] = V[i - 1, :i]
            V[i, :i] = 0

        d[i] = h

    # Accumulate transformations
    for i in range(n - 1):
        V[n - 1, i] = V[i, i]
        V[i, i] = 1
        h = d[i + 1].item()
        if h != 0:
            d[:i + 1] = V[:i + 1, i + 1] / h
            g = V[:i + 1, i + 1] @ V[:i + 1, :i + 1]
            V[:i + 1, :i + 1] -= torch.outer(d[:i + 1], g)
        V[:i + 1, i + 1] = 0

    d[:] = V[n - 1]
    V[n - 1] = 0
    V[n - 1, n - 1] = 1
    e[0] = 0
    return d, e, V


# =============================================================================
def tridiagonal_ql(d, e, V, max_iterations=MAX_ITERATIONS, sort=True):
    r"""Diagonalize the symmetric tridiagonal matrix given by `(d, e)`.

    The QL algorithm with implicit (Wilkinson) shifts is used. The input
    tensors are overwritten: on exit `d` holds the eigenvalues, `e` is zero
    and the columns of `V` are the eigenvectors, provided `V` held the
    transformation returned by `tridiagonalize`.

    An off-diagonal element is negligible if
    :math:`|e_m| \le \epsilon \max_{l} (|d_l| + |e_l|)`, which splits the
    matrix into independent blocks.

    Parameters
    ----------
    max_iterations : int
        the number of QL sweeps allowed for each eigenvalue; if exceeded a
        `ConvergenceError` is raised.

    sort : boolean
        if True, sort the eigenvalues in ascending order and permute the
        columns of `V` accordingly. (Default is True.)

    Returns
    -------
    the total number of QL sweeps.
    """
    n = d.shape[0]
    eps = get_machine_precision(torch.float64)

    e[:-1] = e[1:].clone()
    e[-1] = 0

    f = 0.
    tst1 = 0.
    total_iterations = 0

    for l in range(n):
        # Find small subdiagonal element
        tst1 = max(tst1, abs(d[l].item()) + abs(e[l].item()))
        m = l
        while m < n - 1 and abs(e[m].item()) > eps * tst1:
            m += 1

        # If m == l, d[l] is an eigenvalue, otherwise, iterate
        iteration = 0
        while m > l:
            iteration += 1
            if iteration > max_iterations:
                raise ConvergenceError("tql2", l, max_iterations)

            # Compute implicit shift
            g = d[l].item()
            el = e[l].item()
            p = (d[l + 1].item() - g) / (2 * el)
            r = math.hypot(p, 1.)
            if p < 0:
                r = -r
            d[l] = el / (p + r)
            d[l + 1] = el * (p + r)
            dl1 = d[l + 1].item()
            h = g - d[l].item()
            d[l + 2:] -= h
            f += h

            # Implicit QL transformation
            p = d[m].item()
            c = c2 = c3 = 1.
            el1 = e[l + 1].item()
            s = s2 = 0.
            for i in range(m - 1, l - 1, -1):
                c3 = c2
                c2 = c
                s2 = s
                ei = e[i].item()
                di = d[i].item()
                g = c * ei
                h = c * p
                r = math.hypot(p, ei)
                e[i + 1] = s * r
                if r == 0:
                    c, s = 1., 0.  # nothing to rotate
                else:
                    s = ei / r
                    c = p / r
                p = c * di - s * g
                d[i + 1] = h + s * (c * g + s * di)

                # Accumulate transformation
                v_i, v_ip1 = V[:, i].clone(), V[:, i + 1].clone()
                V[:, i + 1] = s * v_i + c * v_ip1
                V[:, i] = c * v_i - s * v_ip1

            p = -s * s2 * c3 * el1 * e[l].item() / dl1
            e[l] = s * p
            d[l] = c * p

            # Check for convergence
            if abs(e[l].item()) <= eps * tst1:
                break

        total_iterations += iteration
        d[l] = d[l] + f
        e[l] = 0

    if sort:
        d_sorted, V_sorted = sort_eig(d, V)
        d[:] = d_sorted
        V[:] = V_sorted

    return total_iterations
