# *** Eigen decomposition of real square matrices (EISPACK algorithms). ***

from . import generic

from .generic import MAX_ITERATIONS, ConvergenceError
from .generic import is_symmetric, eyes_like, sort_eig, decomposition_residual
from .tridiagonal import tridiagonalize, tridiagonal_ql
from .hessenberg import hessenberg_reduction
from .real_schur import complex_divide, real_schur_eig, EXCEPTIONAL_SHIFTS
from .blocks import block_diagonal, complex_eigvals, complex_eigvecs
from .decomposition import EigenDecomposition, eig, eigh, block_eig
