
# the decomposition is computed once per matrix; see EigenDecomposition
from ._eig import EigenDecomposition
from ._eig import eig
from ._eig import eigh
from ._eig import block_eig

from ._eig import ConvergenceError
from ._eig import MAX_ITERATIONS

# building blocks of the algorithms
from ._eig import block_diagonal
from ._eig import complex_divide
from ._eig import is_symmetric
from ._eig import eyes_like
from ._eig import decomposition_residual
