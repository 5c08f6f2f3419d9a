import pytest
import torch

from torch_real_eig import EigenDecomposition, block_diagonal
from torch_real_eig import eig, eigh, block_eig, is_symmetric


def test_block_diagonal():
    d = torch.tensor([1., 2., 2., 5.], dtype=torch.float64)
    e = torch.tensor([0., 3., -3., 0.], dtype=torch.float64)
    expected = torch.tensor([[1., 0., 0., 0.],
                             [0., 2., 3., 0.],
                             [0., -3., 2., 0.],
                             [0., 0., 0., 5.]], dtype=torch.float64)
    assert torch.equal(block_diagonal(d, e), expected)


def test_block_diagonal_into_caller_output():
    d = torch.tensor([0., 0.], dtype=torch.float64)
    e = torch.tensor([1., -1.], dtype=torch.float64)
    out = torch.full((2, 2), 7., dtype=torch.float64)
    result = block_diagonal(d, e, out=out)
    assert result is out
    assert torch.equal(out, torch.tensor([[0., 1.], [-1., 0.]], dtype=torch.float64))

    with pytest.raises(ValueError):
        block_diagonal(d, e, out=torch.zeros(3, 3, dtype=torch.float64))


def test_decomposition_D_into_caller_output():
    matrix = torch.tensor([[2., 1.], [1., 2.]], dtype=torch.float64)
    decomp = EigenDecomposition(matrix)
    out = torch.empty(2, 2, dtype=torch.float64)
    decomp.D(out)
    assert torch.allclose(out, torch.diag(torch.tensor([1., 3.], dtype=torch.float64)))


def test_accessors_do_not_expose_state():
    decomp = EigenDecomposition(torch.tensor([[2., 1.], [1., 2.]], dtype=torch.float64))
    decomp.d[0] = 100.
    decomp.V[0, 0] = 100.
    assert decomp.d[0] != 100.
    assert decomp.V[0, 0] != 100.


@pytest.mark.parametrize("bad", [
    torch.zeros(2, 3),
    torch.zeros(0, 0),
    torch.zeros(3),
    torch.zeros(2, 2, 2),
    torch.zeros(2, 2, dtype=torch.complex128),
    ])
def test_invalid_input(bad):
    with pytest.raises(ValueError):
        EigenDecomposition(bad)


def test_integer_and_list_input():
    decomp = EigenDecomposition([[2, 0], [0, 1]])
    assert decomp.d.dtype == torch.float64
    assert torch.equal(decomp.d, torch.tensor([1., 2.], dtype=torch.float64))


def test_float32_input():
    matrix = torch.tensor([[0., 1.], [-2., -3.]], dtype=torch.float32)
    decomp = EigenDecomposition(matrix)
    assert decomp.d.dtype == torch.float32
    assert decomp.V.dtype == torch.float32
    assert torch.allclose(matrix @ decomp.V, decomp.V @ decomp.D(), atol=1e-5)


def test_is_symmetric():
    assert is_symmetric(torch.eye(3))
    assert is_symmetric(torch.zeros(3, 3))
    assert not is_symmetric(torch.tensor([[0., 1.], [-1., 0.]]))


def test_print_details(capsys):
    EigenDecomposition(torch.eye(2, dtype=torch.float64), print_details=True)
    assert "tred2 & tql2" in capsys.readouterr().out
    EigenDecomposition(torch.tensor([[0., 1.], [-1., 0.]]), print_details=True)
    assert "orthes & hqr2" in capsys.readouterr().out


def test_repr():
    decomp = EigenDecomposition(torch.tensor([[0., 1.], [-1., 0.]]))
    assert repr(decomp) == "EigenDecomposition(general, n=2)"


# =============================================================================
def test_batched_eig():
    gen = torch.Generator().manual_seed(0)
    matrix = torch.randn(2, 3, 4, 4, dtype=torch.float64, generator=gen)
    vals, vecs = eig(matrix)
    assert vals.shape == (2, 3, 4)
    assert vecs.shape == (2, 3, 4, 4)
    lhs = (matrix + 0j) @ vecs
    assert torch.allclose(lhs, vecs * vals.unsqueeze(-2), atol=1e-10)


def test_batched_eigh():
    gen = torch.Generator().manual_seed(1)
    a = torch.randn(3, 5, 5, dtype=torch.float64, generator=gen)
    matrix = a + a.transpose(-1, -2)
    vals, vecs = eigh(matrix)
    expected_vals, _ = torch.linalg.eigh(matrix)
    assert torch.allclose(vals, expected_vals, atol=1e-10)
    assert torch.allclose(matrix @ vecs, vecs * vals.unsqueeze(-2), atol=1e-10)

    with pytest.raises(ValueError):
        eigh(torch.tensor([[0., 1.], [-1., 0.]]))


def test_batched_block_eig():
    gen = torch.Generator().manual_seed(2)
    matrix = torch.randn(4, 3, 3, dtype=torch.float64, generator=gen)
    D, V = block_eig(matrix)
    assert D.shape == V.shape == (4, 3, 3)
    assert torch.allclose(matrix @ V, V @ D, atol=1e-9)


def test_batched_empty():
    matrix = torch.zeros(0, 3, 3, dtype=torch.float64)
    vals, vecs = eig(matrix)
    assert vals.shape == (0, 3) and vecs.shape == (0, 3, 3)
    assert vals.dtype == vecs.dtype == torch.complex128

    vals, vecs = eigh(matrix)
    assert vals.shape == (0, 3) and vecs.shape == (0, 3, 3)
    assert vals.dtype == torch.float64

    D, V = block_eig(torch.zeros(2, 0, 4, 4, dtype=torch.float32))
    assert D.shape == V.shape == (2, 0, 4, 4)
    assert D.dtype == torch.float32
