# Copyright (c) 2023 Javad Komijani

r"""
Eigenvalues and eigenvectors of a real upper Hessenberg matrix.

The matrix is reduced to real Schur form by the double-shift (Francis) QR
algorithm and the eigenvectors are obtained by back-substitution (`hqr2` of
EISPACK, following the JAMA/TNT versions). Complex conjugate eigenvalues
:math:`a \pm i b` are kept as real 2x2 blocks; their eigenvectors occupy two
real columns, the real part followed by the imaginary part.

The eigenvectors of non-symmetric matrices need not be orthogonal, and for
(nearly) defective matrices they are (nearly) linearly dependent.
"""

import math
import torch
import warnings

from .generic import MAX_ITERATIONS, ConvergenceError
from .generic import get_machine_precision


# sweeps on one eigenvalue after which the Wilkinson and MATLAB ad hoc shifts
# are applied
EXCEPTIONAL_SHIFTS = (10, 20)


# =============================================================================
def complex_divide(xr, xi, yr, yi):
    r"""Return the real and imaginary parts of :math:`(x_r + i x_i) /
    (y_r + i y_i)`.

    The smaller of :math:`|y_r|` and :math:`|y_i|` is divided by the larger
    one first (Smith's method), which avoids the under/overflow of the naive
    formula. A vanishing denominator is replaced by the smallest normal
    number.
    """
    if yr == 0 and yi == 0:
        yr = torch.finfo(torch.float64).tiny

    if abs(yr) > abs(yi):
        r = yi / yr
        d = yr + r * yi
        return (xr + r * xi) / d, (xi - r * xr) / d
    else:
        r = yr / yi
        d = yi + r * yr
        return (r * xr + xi) / d, (r * xi - xr) / d


# =============================================================================
def real_schur_eig(H, V, max_iterations=MAX_ITERATIONS,
        exceptional_shifts=EXCEPTIONAL_SHIFTS
        ):
    r"""Compute eigenvalues and eigenvectors from the Hessenberg form.

    Parameters
    ----------
    H : tensor
        upper Hessenberg matrix; it is used as working storage and destroyed.

    V : tensor
        the orthogonal transformation that reduced the original matrix to `H`;
        it is updated in place to the matrix of (real) eigenvectors.

    max_iterations : int
        the number of QR sweeps allowed for each eigenvalue; if exceeded a
        `ConvergenceError` is raised.

    exceptional_shifts : tuple of two ints
        the sweep counts at which the Wilkinson and the MATLAB ad hoc shifts
        are applied to break a stalled iteration.

    Returns
    -------
    d, e : tensors
        real and imaginary parts of the eigenvalues; a complex pair is stored
        with the positive imaginary part first.
    V : tensor
        the matrix of eigenvectors, same object as the input.
    total_iterations : int
        the number of QR sweeps.
    """
    size = H.shape[-1]
    d = torch.zeros(size, dtype=torch.float64)
    e = torch.zeros(size, dtype=torch.float64)
    eps = get_machine_precision(torch.float64)
    exshift = 0.
    wilkinson_sweep, matlab_sweep = exceptional_shifts
    p = q = r = s = z = 0.
    w = x = y = 0.

    # Norm of the Hessenberg part, used for splitting and as pivot floor
    norm = torch.sum(torch.abs(torch.triu(H, diagonal=-1))).item()

    # Outer loop over eigenvalue index
    n = size - 1
    iteration = 0
    total_iterations = 0
    while n >= 0:

        # Look for single small sub-diagonal element
        l = n
        while l > 0:
            s = abs(H[l - 1, l - 1].item()) + abs(H[l, l].item())
            if s == 0:
                s = norm
            if abs(H[l, l - 1].item()) <= eps * s:
                break
            l -= 1

        # Check for convergence
        if l == n:
            # One root found
            H[n, n] += exshift
            d[n] = H[n, n]
            e[n] = 0
            n -= 1
            total_iterations += iteration
            iteration = 0

        elif l == n - 1:
            # Two roots found
            w = H[n, n - 1].item() * H[n - 1, n].item()
            p = (H[n - 1, n - 1].item() - H[n, n].item()) / 2
            q = p * p + w
            z = math.sqrt(abs(q))
            H[n, n] += exshift
            H[n - 1, n - 1] += exshift
            x = H[n, n].item()

            if q >= 0:
                # Real pair
                z = p + z if p >= 0 else p - z
                d[n - 1] = x + z
                d[n] = x - w / z if z != 0 else x + z
                e[n - 1] = 0
                e[n] = 0
                x = H[n, n - 1].item()
                s = abs(x) + abs(z)
                p = x / s
                q = z / s
                r = math.sqrt(p * p + q * q)
                p = p / r
                q = q / r

                # Row modification
                row = H[n - 1, n - 1:].clone()
                H[n - 1, n - 1:] = q * row + p * H[n, n - 1:]
                H[n, n - 1:] = q * H[n, n - 1:] - p * row

                # Column modification
                col = H[:n + 1, n - 1].clone()
                H[:n + 1, n - 1] = q * col + p * H[:n + 1, n]
                H[:n + 1, n] = q * H[:n + 1, n] - p * col

                # Accumulate transformations
                col = V[:, n - 1].clone()
                V[:, n - 1] = q * col + p * V[:, n]
                V[:, n] = q * V[:, n] - p * col

            else:
                # Complex pair
                d[n - 1] = x + p
                d[n] = x + p
                e[n - 1] = z
                e[n] = -z

            n -= 2
            total_iterations += iteration
            iteration = 0

        else:
            # No convergence yet; form shift
            x = H[n, n].item()
            y = H[n - 1, n - 1].item()
            w = H[n, n - 1].item() * H[n - 1, n].item()

            # Wilkinson's original ad hoc shift
            if iteration == wilkinson_sweep:
                exshift += x
                torch.diagonal(H)[:n + 1] -= x
                s = abs(H[n, n - 1].item()) + abs(H[n - 1, n - 2].item())
                x = y = 0.75 * s
                w = -0.4375 * s * s

            # MATLAB's ad hoc shift
            if iteration == matlab_sweep:
                s = (y - x) / 2
                s = s * s + w
                if s > 0:
                    s = math.sqrt(s)
                    if y < x:
                        s = -s
                    s = x - w / ((y - x) / 2 + s)
                    torch.diagonal(H)[:n + 1] -= s
                    exshift += s
                    x = y = w = 0.964

            iteration += 1
            if iteration > max_iterations:
                raise ConvergenceError("hqr2", n, max_iterations)

            # Look for two consecutive small sub-diagonal elements
            m = n - 2
            while m >= l:
                z = H[m, m].item()
                r = x - z
                s = y - z
                p = (r * s - w) / H[m + 1, m].item() + H[m, m + 1].item()
                q = H[m + 1, m + 1].item() - z - r - s
                r = H[m + 2, m + 1].item()
                s = abs(p) + abs(q) + abs(r)
                p = p / s
                q = q / s
                r = r / s
                if m == l:
                    break
                lhs = abs(H[m, m - 1].item()) * (abs(q) + abs(r))
                rhs = eps * (abs(p) * (abs(H[m - 1, m - 1].item()) + abs(z)
                                       + abs(H[m + 1, m + 1].item())))
                if lhs < rhs:
                    break
                m -= 1

            for i in range(m + 2, n + 1):
                H[i, i - 2] = 0
                if i > m + 2:
                    H[i, i - 3] = 0

            # Double QR step involving rows l:n and columns m:n
            for k in range(m, n):
                notlast = (k != n - 1)
                if k != m:
                    p = H[k, k - 1].item()
                    q = H[k + 1, k - 1].item()
                    r = H[k + 2, k - 1].item() if notlast else 0.
                    x = abs(p) + abs(q) + abs(r)
                    if x == 0:
                        continue
                    p = p / x
                    q = q / x
                    r = r / x

                s = math.sqrt(p * p + q * q + r * r)
                if p < 0:
                    s = -s
                if s == 0:
                    continue

                if k != m:
                    H[k, k - 1] = -s * x
                elif l != m:
                    H[k, k - 1] = -H[k, k - 1]
                p = p + s
                x = p / s
                y = q / s
                z = r / s
                q = q / p
                r = r / p

                # Row modification
                row = H[k, k:] + q * H[k + 1, k:]
                if notlast:
                    row = row + r * H[k + 2, k:]
                    H[k + 2, k:] -= row * z
                H[k, k:] -= row * x
                H[k + 1, k:] -= row * y

                # Column modification
                top = min(n, k + 3) + 1
                col = x * H[:top, k] + y * H[:top, k + 1]
                if notlast:
                    col = col + z * H[:top, k + 2]
                    H[:top, k + 2] -= col * r
                H[:top, k] -= col
                H[:top, k + 1] -= col * q

                # Accumulate transformations
                col = x * V[:, k] + y * V[:, k + 1]
                if notlast:
                    col = col + z * V[:, k + 2]
                    V[:, k + 2] -= col * r
                V[:, k] -= col
                V[:, k + 1] -= col * q

    # Backsubstitute to find vectors of upper triangular form
    if norm == 0:
        return d, e, V, total_iterations

    floored = False
    for n in range(size - 1, -1, -1):
        p = d[n].item()
        q = e[n].item()

        if q == 0:
            # Real vector
            l = n
            H[n, n] = 1
            for i in range(n - 1, -1, -1):
                w = H[i, i].item() - p
                r = torch.dot(H[i, l:n + 1], H[l:n + 1, n]).item()
                if e[i].item() < 0:
                    z = w
                    s = r
                    continue

                l = i
                if e[i].item() == 0:
                    if w == 0:
                        w = eps * norm
                        floored = True
                    H[i, n] = -r / w
                else:
                    # Solve real equations
                    x = H[i, i + 1].item()
                    y = H[i + 1, i].item()
                    q = (d[i].item() - p)**2 + e[i].item()**2
                    t = (x * s - z * r) / q
                    H[i, n] = t
                    if abs(x) > abs(z):
                        H[i + 1, n] = (-r - w * t) / x
                    else:
                        if z == 0:
                            z = eps * norm
                            floored = True
                        H[i + 1, n] = (-s - y * t) / z

                # Overflow control
                t = abs(H[i, n].item())
                if (eps * t) * t > 1:
                    H[i:n + 1, n] /= t

        elif q < 0:
            # Complex vector
            l = n - 1

            # Last vector component imaginary so matrix is triangular
            if abs(H[n, n - 1].item()) > abs(H[n - 1, n].item()):
                H[n - 1, n - 1] = q / H[n, n - 1].item()
                H[n - 1, n] = -(H[n, n].item() - p) / H[n, n - 1].item()
            else:
                H[n - 1, n - 1], H[n - 1, n] = complex_divide(
                        0., -H[n - 1, n].item(), H[n - 1, n - 1].item() - p, q
                        )
            H[n, n - 1] = 0
            H[n, n] = 1

            for i in range(n - 2, -1, -1):
                ra = torch.dot(H[i, l:n + 1], H[l:n + 1, n - 1]).item()
                sa = torch.dot(H[i, l:n + 1], H[l:n + 1, n]).item()
                w = H[i, i].item() - p
                if e[i].item() < 0:
                    z = w
                    r = ra
                    s = sa
                    continue

                l = i
                if e[i].item() == 0:
                    H[i, n - 1], H[i, n] = complex_divide(-ra, -sa, w, q)
                else:
                    # Solve complex equations
                    x = H[i, i + 1].item()
                    y = H[i + 1, i].item()
                    vr = (d[i].item() - p)**2 + e[i].item()**2 - q * q
                    vi = (d[i].item() - p) * 2 * q
                    if vr == 0 and vi == 0:
                        vr = eps * norm * (
                                abs(w) + abs(q) + abs(x) + abs(y) + abs(z)
                                )
                        floored = True
                    H[i, n - 1], H[i, n] = complex_divide(
                            x * r - z * ra + q * sa,
                            x * s - z * sa - q * ra,
                            vr, vi
                            )
                    h_r, h_i = H[i, n - 1].item(), H[i, n].item()
                    if abs(x) > abs(z) + abs(q):
                        H[i + 1, n - 1] = (-ra - w * h_r + q * h_i) / x
                        H[i + 1, n] = (-sa - w * h_i - q * h_r) / x
                    else:
                        H[i + 1, n - 1], H[i + 1, n] = complex_divide(
                                -r - y * h_r, -s - y * h_i, z, q
                                )

                # Overflow control
                t = max(abs(H[i, n - 1].item()), abs(H[i, n].item()))
                if (eps * t) * t > 1:
                    H[i:n + 1, n - 1] /= t
                    H[i:n + 1, n] /= t

    if floored:
        warnings.warn(
            "Zero pivot in eigenvector back-substitution; the matrix is"
            " (nearly) defective and the eigenvectors may be inaccurate."
            )

    # Back transformation to get eigenvectors of original matrix
    V[:] = V @ torch.triu(H)

    return d, e, V, total_iterations
