# Copyright (c) 2023 Javad Komijani

import torch


# =============================================================================
def block_diagonal(d, e, out=None):
    r"""Return the real block diagonal eigenvalue matrix :math:`D`.

    Real eigenvalues give 1x1 blocks and a complex pair :math:`a \pm i b`,
    stored as `d = (a, a)` and `e = (b, -b)` with :math:`b > 0`, gives the 2x2
    block

    .. math::

        [[ a, b]
         [-b, a]]

    so that :math:`A V = V D`.

    Parameters
    ----------
    d, e : tensor
        real and imaginary parts of the eigenvalues; can be batched.

    out : tensor, optional
        if given, `D` is written into it; its shape must be `(..., n, n)`.
    """
    n = d.shape[-1]
    shape = (*d.shape, n)
    if out is None:
        out = torch.zeros(shape, dtype=d.dtype, device=d.device)
    elif tuple(out.shape) != shape:
        raise ValueError(f"out has shape {tuple(out.shape)}, expected {shape}")
    else:
        out.zero_()

    out.diagonal(dim1=-2, dim2=-1).copy_(d)
    out.diagonal(offset=1, dim1=-2, dim2=-1).copy_(e[..., :-1].clamp(min=0))
    out.diagonal(offset=-1, dim1=-2, dim2=-1).copy_(e[..., 1:].clamp(max=0))
    return out


def complex_eigvals(d, e):
    return torch.complex(d, e)


def complex_eigvecs(e, V):
    """Return complex eigenvectors, normalized to unity, from the real matrix
    `V` of a (single) decomposition.

    The columns `(i, i+1)` of a complex pair hold the real and imaginary parts
    of the eigenvector of `d[i] + i e[i]`; the eigenvector of the conjugate
    eigenvalue is the conjugate vector.
    """
    eigvecs = V + 0j
    n = e.shape[-1]
    i = 0
    while i < n:
        if e[i] > 0 and i + 1 < n:
            re, im = V[:, i], V[:, i + 1]
            eigvecs[:, i] = re + 1j * im
            eigvecs[:, i + 1] = re - 1j * im
            i += 2
        else:
            i += 1
    return eigvecs / torch.linalg.vector_norm(eigvecs, dim=0, keepdim=True)
