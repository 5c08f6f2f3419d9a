# Copyright (c) 2023 Javad Komijani

r"""
Eigen decomposition of real square matrices.

If :math:`A` is symmetric, then :math:`A = V D V^T` where the eigenvalue
matrix :math:`D` is diagonal and the eigenvector matrix :math:`V` is
orthogonal.

If :math:`A` is not symmetric, then :math:`D` is block diagonal with the real
eigenvalues in 1x1 blocks and any complex eigenvalues, :math:`a + i b`, in
2x2 blocks :math:`[[a, b], [-b, a]]`. This keeps :math:`V` real and
:math:`A V = V D` holds in both cases. The matrix :math:`V` may be badly
conditioned, or even singular, so the validity of :math:`A = V D V^{-1}`
depends on the condition number of :math:`V`.
"""

import torch

from .generic import MAX_ITERATIONS, is_symmetric, decomposition_residual
from .tridiagonal import tridiagonalize, tridiagonal_ql
from .hessenberg import hessenberg_reduction
from .real_schur import real_schur_eig
from .blocks import block_diagonal, complex_eigvals, complex_eigvecs


# =============================================================================
class EigenDecomposition:
    """Eigen decomposition of a real square matrix.

    The decomposition is computed once, in the constructor; the instance is
    read-only afterwards.

    Parameters
    ----------
    matrix : tensor
        real square matrix of shape `(n, n)` with `n >= 1`. It is not
        modified. Integer matrices are converted to float64.

    max_iterations : int
        the number of QL/QR sweeps allowed for each eigenvalue. A
        `ConvergenceError` is raised if it is exceeded.

    sort : boolean
        sort the eigenvalues of symmetric matrices in ascending order.
        (Default is True.) Non-symmetric matrices are never sorted because the
        2x2 blocks must stay in place.

    symmetry_tol : float, optional
        relative tolerance of the symmetry test; see `is_symmetric`.

    print_details : boolean
        print which algorithm was used and the number of sweeps.
    """

    def __init__(self, matrix,
            max_iterations=MAX_ITERATIONS, sort=True, symmetry_tol=None,
            print_details=False
            ):
        matrix = check_square_matrix(matrix)
        dtype = matrix.dtype if matrix.is_floating_point() else torch.float64
        matrix = matrix.to(torch.float64)

        self._symmetric = is_symmetric(matrix, tol=symmetry_tol)

        if self._symmetric:
            d, e, V = tridiagonalize((matrix + matrix.T) / 2)
            iterations = tridiagonal_ql(
                    d, e, V, max_iterations=max_iterations, sort=sort
                    )
        else:
            H, V = hessenberg_reduction(matrix)
            d, e, V, iterations = real_schur_eig(
                    H, V, max_iterations=max_iterations
                    )

        self._d = d.to(dtype)
        self._e = e.to(dtype)
        self._V = V.to(dtype)
        self._iterations = iterations

        if print_details:
            method = "tred2 & tql2" if self._symmetric else "orthes & hqr2"
            print(f"{method} converged, n = {d.shape[0]}, k_iter = {iterations}")

    @property
    def symmetric(self):
        """True if the symmetric algorithm was used."""
        return self._symmetric

    @property
    def iterations(self):
        """Total number of QL/QR sweeps spent."""
        return self._iterations

    @property
    def d(self):
        """Real parts of the eigenvalues."""
        return self._d.clone()

    @property
    def e(self):
        """Imaginary parts of the eigenvalues."""
        return self._e.clone()

    @property
    def V(self):
        """Matrix of eigenvectors; complex pairs take two columns."""
        return self._V.clone()

    def D(self, out=None):
        """Return the block diagonal eigenvalue matrix, written into `out` if
        it is given.
        """
        return block_diagonal(self._d, self._e, out=out)

    def eigvals(self):
        return complex_eigvals(self._d, self._e)

    def eigvecs(self):
        return complex_eigvecs(self._e, self._V)

    def residual(self, matrix, return_error_norm=True):
        """Return the errors of :math:`A V = V D` and :math:`V^T V = I` for the
        decomposed `matrix`.
        """
        matrix = torch.as_tensor(matrix).to(self._V.dtype)
        return decomposition_residual(
                matrix, self._V, self.D(), return_error_norm=return_error_norm
                )

    def __repr__(self):
        kind = "symmetric" if self._symmetric else "general"
        return f"EigenDecomposition({kind}, n={self._d.shape[0]})"


# =============================================================================
def check_square_matrix(matrix, batched=False):
    """Return `matrix` as a tensor after checking that it is a nonempty, real,
    square matrix (or a batch of them if `batched` is True).
    """
    matrix = torch.as_tensor(matrix)
    if matrix.is_complex():
        raise ValueError("matrix must be real")
    if matrix.ndim < 2 or (matrix.ndim > 2 and not batched):
        raise ValueError(f"expected a matrix, got shape {tuple(matrix.shape)}")
    if matrix.shape[-1] != matrix.shape[-2]:
        raise ValueError(f"matrix must be square, got {tuple(matrix.shape)}")
    if matrix.shape[-1] == 0:
        raise ValueError("matrix must not be empty")
    return matrix


def _decompose_all(matrix, **kwargs):
    matrix = check_square_matrix(matrix, batched=True)
    n = matrix.shape[-1]
    batch = matrix.shape[:-2].numel()
    return matrix, [
            EigenDecomposition(mat, **kwargs) for mat in matrix.reshape(batch, n, n)
            ]


def _empty_batch(matrix, shape):
    # result for a batch with no matrices, in the dtype a decomposition returns
    dtype = matrix.dtype if matrix.is_floating_point() else torch.float64
    return torch.zeros(shape, dtype=dtype)


def eig(matrix, **kwargs):
    """Return complex eigenvalues and normalized eigenvectors of real square
    matrices, similar to `torch.linalg.eig`.

    Batches are supported; each matrix is decomposed separately.
    """
    matrix, decomps = _decompose_all(matrix, **kwargs)
    shape = matrix.shape
    if not decomps:
        return (_empty_batch(matrix, shape[:-1]) + 0j,
                _empty_batch(matrix, shape) + 0j)
    eigvals = torch.stack([x.eigvals() for x in decomps])
    eigvecs = torch.stack([x.eigvecs() for x in decomps])
    return eigvals.reshape(shape[:-1]), eigvecs.reshape(shape)


def eigh(matrix, **kwargs):
    """Return real eigenvalues, in ascending order by default, and orthogonal
    eigenvectors of real symmetric matrices.

    Batches are supported; each matrix is decomposed separately.
    """
    matrix, decomps = _decompose_all(matrix, **kwargs)
    shape = matrix.shape
    if not decomps:
        return _empty_batch(matrix, shape[:-1]), _empty_batch(matrix, shape)
    if not all(x.symmetric for x in decomps):
        raise ValueError("eigh requires symmetric matrices; use eig")
    eigvals = torch.stack([x.d for x in decomps])
    eigvecs = torch.stack([x.V for x in decomps])
    return eigvals.reshape(shape[:-1]), eigvecs.reshape(shape)


def block_eig(matrix, **kwargs):
    """Return the real block diagonal eigenvalue matrices `D` and the real
    eigenvector matrices `V` with :math:`A V = V D`.

    Batches are supported; each matrix is decomposed separately.
    """
    matrix, decomps = _decompose_all(matrix, **kwargs)
    shape = matrix.shape
    if not decomps:
        return _empty_batch(matrix, shape), _empty_batch(matrix, shape)
    D = torch.stack([x.D() for x in decomps])
    V = torch.stack([x.V for x in decomps])
    return D.reshape(shape), V.reshape(shape)
