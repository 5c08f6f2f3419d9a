import math

import numpy as np
import pytest
import torch

from torch_real_eig import EigenDecomposition, ConvergenceError
from torch_real_eig._eig import tridiagonalize, tridiagonal_ql


def random_symmetric(n, seed):
    gen = torch.Generator().manual_seed(seed)
    a = torch.randn(n, n, dtype=torch.float64, generator=gen)
    return a + a.T


def assert_valid_symmetric(matrix, eig):
    scale = max(torch.linalg.matrix_norm(matrix).item(), 1.)
    null_error, orthogonal_error = eig.residual(matrix)
    assert eig.symmetric
    assert null_error < 1e-12 * scale * matrix.shape[-1]
    assert orthogonal_error < 1e-12 * matrix.shape[-1]
    assert torch.all(eig.e == 0)


@pytest.mark.parametrize("n", [1, 2, 3, 5, 8, 13])
def test_random_symmetric(n):
    matrix = random_symmetric(n, seed=n)
    eig = EigenDecomposition(matrix)
    assert_valid_symmetric(matrix, eig)

    expected = np.linalg.eigvalsh(matrix.numpy())
    assert np.allclose(eig.d.numpy(), expected, atol=1e-10)


def test_eigenvalues_sorted_ascending():
    eig = EigenDecomposition(random_symmetric(7, seed=11))
    assert torch.all(eig.d[1:] >= eig.d[:-1])


def test_unsorted_eigenvalues_keep_vectors_consistent():
    matrix = random_symmetric(6, seed=5)
    eig = EigenDecomposition(matrix, sort=False)
    assert_valid_symmetric(matrix, eig)
    sorted_eig = EigenDecomposition(matrix)
    assert torch.allclose(torch.sort(eig.d).values, sorted_eig.d, atol=1e-12)


def test_identity():
    eig = EigenDecomposition(torch.eye(4, dtype=torch.float64))
    assert torch.allclose(eig.d, torch.ones(4, dtype=torch.float64))
    assert torch.all(eig.e == 0)
    # any column order is acceptable for a repeated eigenvalue
    assert torch.allclose(eig.V.abs().sum(dim=0), torch.ones(4, dtype=torch.float64))
    assert torch.allclose(eig.V.abs().sum(dim=1), torch.ones(4, dtype=torch.float64))
    assert eig.iterations == 0


def test_diagonal_with_distinct_entries():
    matrix = torch.diag(torch.tensor([3., 1., 2.], dtype=torch.float64))
    eig = EigenDecomposition(matrix)
    assert torch.allclose(eig.d, torch.tensor([1., 2., 3.], dtype=torch.float64))
    assert torch.all(eig.e == 0)
    permutation = torch.eye(3, dtype=torch.float64)[:, [1, 2, 0]]
    assert torch.allclose(eig.V.abs(), permutation)


def test_repeated_eigenvalue():
    matrix = 3 * torch.eye(2, dtype=torch.float64)
    eig = EigenDecomposition(matrix)
    assert torch.allclose(eig.d, torch.tensor([3., 3.], dtype=torch.float64))
    assert_valid_symmetric(matrix, eig)


def test_zero_row_is_skipped():
    matrix = torch.tensor([[4., 1., 0.],
                           [1., 3., 0.],
                           [0., 0., 0.]], dtype=torch.float64)
    eig = EigenDecomposition(matrix)
    assert_valid_symmetric(matrix, eig)
    assert eig.d[0].abs() < 1e-12


def test_zero_matrix():
    matrix = torch.zeros(3, 3, dtype=torch.float64)
    eig = EigenDecomposition(matrix)
    assert torch.all(eig.d == 0)
    assert torch.allclose(eig.V.T @ eig.V, torch.eye(3, dtype=torch.float64))


def test_tridiagonalize():
    matrix = random_symmetric(6, seed=3)
    d, e, V = tridiagonalize(matrix)
    assert e[0] == 0
    assert torch.allclose(V.T @ V, torch.eye(6, dtype=torch.float64), atol=1e-13)

    T = V.T @ matrix @ V
    band = torch.triu(torch.tril(torch.ones(6, 6, dtype=torch.bool), 1), -1)
    assert torch.allclose(T[~band], torch.zeros(1, dtype=torch.float64), atol=1e-12)
    assert torch.allclose(torch.diagonal(T), d, atol=1e-12)
    assert torch.allclose(torch.diagonal(T, -1).abs(), e[1:].abs(), atol=1e-12)


def test_tridiagonal_ql_known_spectrum():
    d = torch.tensor([2., 2., 2.], dtype=torch.float64)
    e = torch.tensor([0., -1., -1.], dtype=torch.float64)
    V = torch.eye(3, dtype=torch.float64)
    iterations = tridiagonal_ql(d, e, V)

    root2 = math.sqrt(2)
    expected = torch.tensor([2 - root2, 2, 2 + root2], dtype=torch.float64)
    assert iterations >= 1
    assert torch.allclose(d, expected, atol=1e-13)
    assert torch.all(e == 0)

    T = torch.tensor([[2., -1., 0.], [-1., 2., -1.], [0., -1., 2.]],
                     dtype=torch.float64)
    assert torch.allclose(T @ V, V * d, atol=1e-13)


def test_nearly_symmetric_uses_symmetric_path():
    matrix = random_symmetric(4, seed=8)
    matrix[0, 1] += 1e-14
    eig = EigenDecomposition(matrix)
    assert eig.symmetric


def test_nonconvergence_is_reported():
    with pytest.raises(ConvergenceError) as excinfo:
        EigenDecomposition(random_symmetric(5, seed=2), max_iterations=0)
    assert excinfo.value.stage == "tql2"
    assert excinfo.value.iterations == 0


def test_deterministic():
    matrix = random_symmetric(9, seed=4)
    first = EigenDecomposition(matrix)
    second = EigenDecomposition(matrix)
    assert torch.equal(first.d, second.d)
    assert torch.equal(first.V, second.V)


def test_input_not_modified():
    matrix = random_symmetric(5, seed=6)
    copy = matrix.clone()
    EigenDecomposition(matrix)
    assert torch.equal(matrix, copy)
