#!/usr/bin/env python3
# =============================================================================
#     File: level3.py
#  Created: 2025-07-14 10:22
#   Author: Bernie Roesler
#
"""
Dimension-checked dense kernels used by the band Cholesky routines.

The :class:`NumpyBlas` object is a thin, stateless shim over NumPy and SciPy.
Every method validates its operand shapes and raises :class:`InvalidDimension`
instead of touching memory it was not given.

Matrix operands may be strided views into band storage (see
:func:`bandchol.band_block`), in which the unreferenced triangle aliases
unrelated entries of the band buffer. Symmetric, Hermitian and triangular
operations therefore read and write *only* the triangle selected by `uplo`.
"""
# =============================================================================

from enum import Enum

import numpy as np

from scipy import linalg as la


class InvalidDimension(ValueError):
    """Raised when operand shapes or band shape parameters are inconsistent."""


class Uplo(str, Enum):
    """Which triangle of a symmetric or triangular matrix is referenced."""
    UPPER = 'U'
    LOWER = 'L'


class Transpose(str, Enum):
    """Operation applied to a matrix operand."""
    NO_TRANS = 'N'
    TRANS = 'T'
    CONJ_TRANS = 'C'


class Side(str, Enum):
    """Side on which a triangular matrix multiplies the other operand."""
    LEFT = 'L'
    RIGHT = 'R'


class Diag(str, Enum):
    """Whether a triangular matrix has an implicit unit diagonal."""
    NON_UNIT = 'N'
    UNIT = 'U'


def _coerce(enum_type, value):
    """Convert a string flag such as ``'u'`` or ``'T'`` to its enum member."""
    if isinstance(value, enum_type):
        return value
    return enum_type(str(value).upper())


def _op(a, trans):
    """Return op(a) for the given transpose flag."""
    match trans:
        case Transpose.NO_TRANS:
            return a
        case Transpose.TRANS:
            return a.T
        case Transpose.CONJ_TRANS:
            return a.conj().T


def _op_shape(a, trans):
    M, N = a.shape
    return (M, N) if trans is Transpose.NO_TRANS else (N, M)


def _check_matrix(a, name):
    if np.ndim(a) != 2:
        raise InvalidDimension(f"{name} must be a 2-D array, "
                               f"got {np.ndim(a)} dimensions.")


def _check_vector(x, name):
    if np.ndim(x) != 1:
        raise InvalidDimension(f"{name} must be a 1-D array, "
                               f"got {np.ndim(x)} dimensions.")


def _check_square(a, name):
    _check_matrix(a, name)
    M, N = a.shape
    if M != N:
        raise InvalidDimension(f"{name} must be square, got {a.shape}.")
    return N


def _triangle(a, uplo, diag=Diag.NON_UNIT):
    """Copy the referenced triangle of `a` into a dense triangular array.

    Entries outside the triangle are never used in arithmetic, so whatever the
    aliased memory holds (including NaN) cannot leak into the result.
    """
    N = a.shape[0]
    t = np.triu(a) if uplo is Uplo.UPPER else np.tril(a)
    if diag is Diag.UNIT:
        t[np.diag_indices(N)] = 1
    return t


def _triangle_indices(N, uplo):
    return np.triu_indices(N) if uplo is Uplo.UPPER else np.tril_indices(N)


class NumpyBlas:
    """Dense level-1/2/3 kernels over NumPy arrays and strided views.

    The object holds no state. It is passed explicitly to every band routine
    so that an alternative implementation can be swapped in for testing.

    Notes
    -----
    Scalar arguments follow the BLAS conventions. When `beta` is zero, the
    output operand is not read, so it may contain uninitialized values.
    """

    # -------------------------------------------------------------------------
    #         Level 1
    # -------------------------------------------------------------------------
    def dot(self, x, y):
        """Compute the unconjugated dot product :math:`x^T y`."""
        _check_vector(x, 'x')
        _check_vector(y, 'y')
        if x.shape != y.shape:
            raise InvalidDimension(f"x and y must have the same length, "
                                   f"got {x.shape} and {y.shape}.")
        return np.dot(x, y)

    def dotc(self, x, y):
        """Compute the conjugated dot product :math:`x^H y`."""
        _check_vector(x, 'x')
        _check_vector(y, 'y')
        if x.shape != y.shape:
            raise InvalidDimension(f"x and y must have the same length, "
                                   f"got {x.shape} and {y.shape}.")
        return np.vdot(x, y)

    def scal(self, alpha, x):
        """Scale the vector `x` in place by `alpha`."""
        _check_vector(x, 'x')
        x *= alpha

    # -------------------------------------------------------------------------
    #         Level 2
    # -------------------------------------------------------------------------
    def gemv(self, trans, alpha, a, x, beta, y):
        """General matrix-vector multiply :math:`y := \\alpha op(A) x + \\beta y`.
        """
        trans = _coerce(Transpose, trans)
        _check_matrix(a, 'A')
        _check_vector(x, 'x')
        _check_vector(y, 'y')

        M, N = _op_shape(a, trans)
        if x.shape[0] != N:
            raise InvalidDimension(f"x must have length {N}, got {x.shape[0]}.")
        if y.shape[0] != M:
            raise InvalidDimension(f"y must have length {M}, got {y.shape[0]}.")

        if M == 0:
            return

        prod = alpha * (_op(a, trans) @ x)
        if beta == 0:
            y[:] = prod
        else:
            y[:] = prod + beta * y

    def trmv(self, uplo, trans, diag, a, x):
        """Compute :math:`x := op(A) x` for a triangular `A`, in place."""
        uplo = _coerce(Uplo, uplo)
        trans = _coerce(Transpose, trans)
        diag = _coerce(Diag, diag)
        N = _check_square(a, 'A')
        _check_vector(x, 'x')
        if x.shape[0] != N:
            raise InvalidDimension(f"x must have length {N}, got {x.shape[0]}.")
        if N == 0:
            return
        x[:] = _op(_triangle(a, uplo, diag), trans) @ x

    def syr(self, uplo, alpha, x, a):
        """Symmetric rank-1 update :math:`A := \\alpha x x^T + A`.

        Only the `uplo` triangle of `a` is updated.
        """
        uplo = _coerce(Uplo, uplo)
        N = _check_square(a, 'A')
        _check_vector(x, 'x')
        if x.shape[0] != N:
            raise InvalidDimension(f"x must have length {N}, got {x.shape[0]}.")
        if N == 0 or alpha == 0:
            return
        idx = _triangle_indices(N, uplo)
        a[idx] += alpha * np.outer(x, x)[idx]

    def her(self, uplo, alpha, x, a):
        """Hermitian rank-1 update :math:`A := \\alpha x x^H + A`, `alpha` real.

        Only the `uplo` triangle of `a` is updated, and the imaginary parts of
        the diagonal are set to zero.
        """
        uplo = _coerce(Uplo, uplo)
        N = _check_square(a, 'A')
        _check_vector(x, 'x')
        if x.shape[0] != N:
            raise InvalidDimension(f"x must have length {N}, got {x.shape[0]}.")
        if N == 0:
            return
        idx = _triangle_indices(N, uplo)
        d = np.diag_indices(N)
        if alpha != 0:
            a[idx] += np.real(alpha) * np.outer(x, x.conj())[idx]
        a[d] = a[d].real

    # -------------------------------------------------------------------------
    #         Level 3
    # -------------------------------------------------------------------------
    def gemm(self, trans_a, trans_b, alpha, a, b, beta, c):
        """General matrix multiply :math:`C := \\alpha op(A) op(B) + \\beta C`.
        """
        trans_a = _coerce(Transpose, trans_a)
        trans_b = _coerce(Transpose, trans_b)
        _check_matrix(a, 'A')
        _check_matrix(b, 'B')
        _check_matrix(c, 'C')

        M, K = _op_shape(a, trans_a)
        Kb, N = _op_shape(b, trans_b)

        if K != Kb:
            raise InvalidDimension(f"Inner dimensions of op(A) {(M, K)} and "
                                   f"op(B) {(Kb, N)} do not match.")
        if c.shape != (M, N):
            raise InvalidDimension(f"C must have shape {(M, N)}, "
                                   f"got {c.shape}.")

        if M == 0 or N == 0:
            return

        prod = alpha * (_op(a, trans_a) @ _op(b, trans_b))
        if beta == 0:
            c[...] = prod
        else:
            c[...] = prod + beta * c

    def _rank_k(self, uplo, trans, alpha, a, beta, c, hermitian):
        uplo = _coerce(Uplo, uplo)
        trans = _coerce(Transpose, trans)
        _check_matrix(a, 'A')
        N = _check_square(c, 'C')

        if hermitian and trans is Transpose.TRANS:
            raise ValueError("herk requires trans in {'N', 'C'}.")
        if not hermitian and trans is Transpose.CONJ_TRANS:
            if np.iscomplexobj(a):
                raise ValueError("Complex syrk requires trans in {'N', 'T'}.")
            trans = Transpose.TRANS

        Na, K = _op_shape(a, trans)
        if Na != N:
            raise InvalidDimension(f"op(A) has {Na} rows, but C is "
                                   f"{c.shape}.")

        if N == 0:
            return

        idx = _triangle_indices(N, uplo)
        opa = _op(a, trans)
        if hermitian:
            prod = opa @ opa.conj().T
        else:
            prod = opa @ opa.T

        if beta == 0:
            c[idx] = alpha * prod[idx]
        else:
            c[idx] = alpha * prod[idx] + beta * c[idx]

        if hermitian:
            d = np.diag_indices(N)
            c[d] = c[d].real

    def syrk(self, uplo, trans, alpha, a, beta, c):
        """Symmetric rank-k update of the `uplo` triangle of `c`.

        .. math::
            C := \\alpha A A^T + \\beta C \\quad \\text{or} \\quad
            C := \\alpha A^T A + \\beta C
        """
        self._rank_k(uplo, trans, alpha, a, beta, c, hermitian=False)

    def herk(self, uplo, trans, alpha, a, beta, c):
        """Hermitian rank-k update of the `uplo` triangle of `c`.

        .. math::
            C := \\alpha A A^H + \\beta C \\quad \\text{or} \\quad
            C := \\alpha A^H A + \\beta C

        `alpha` and `beta` are real.
        """
        self._rank_k(uplo, trans, np.real(alpha), a, np.real(beta), c,
                     hermitian=True)

    def _rank_2k(self, uplo, trans, alpha, a, b, beta, c, hermitian):
        uplo = _coerce(Uplo, uplo)
        trans = _coerce(Transpose, trans)
        _check_matrix(a, 'A')
        _check_matrix(b, 'B')
        N = _check_square(c, 'C')

        if a.shape != b.shape:
            raise InvalidDimension(f"A and B must have the same shape, "
                                   f"got {a.shape} and {b.shape}.")
        if hermitian and trans is Transpose.TRANS:
            raise ValueError("her2k requires trans in {'N', 'C'}.")
        if not hermitian and trans is Transpose.CONJ_TRANS:
            if np.iscomplexobj(a):
                raise ValueError("Complex syr2k requires trans in {'N', 'T'}.")
            trans = Transpose.TRANS

        Na, K = _op_shape(a, trans)
        if Na != N:
            raise InvalidDimension(f"op(A) has {Na} rows, but C is "
                                   f"{c.shape}.")

        if N == 0:
            return

        idx = _triangle_indices(N, uplo)
        opa = _op(a, trans)
        opb = _op(b, trans)
        if hermitian:
            prod = (alpha * (opa @ opb.conj().T)
                    + np.conj(alpha) * (opb @ opa.conj().T))
        else:
            prod = alpha * (opa @ opb.T + opb @ opa.T)

        if beta == 0:
            c[idx] = prod[idx]
        else:
            c[idx] = prod[idx] + beta * c[idx]

        if hermitian:
            d = np.diag_indices(N)
            c[d] = c[d].real

    def syr2k(self, uplo, trans, alpha, a, b, beta, c):
        """Symmetric rank-2k update of the `uplo` triangle of `c`."""
        self._rank_2k(uplo, trans, alpha, a, b, beta, c, hermitian=False)

    def her2k(self, uplo, trans, alpha, a, b, beta, c):
        """Hermitian rank-2k update of the `uplo` triangle of `c`.

        `beta` is real.
        """
        self._rank_2k(uplo, trans, alpha, a, b, np.real(beta), c,
                      hermitian=True)

    def _symmetric_multiply(self, side, uplo, alpha, a, b, beta, c,
                            hermitian):
        side = _coerce(Side, side)
        uplo = _coerce(Uplo, uplo)
        N = _check_square(a, 'A')
        _check_matrix(b, 'B')
        _check_matrix(c, 'C')

        M, Nb = b.shape
        if c.shape != b.shape:
            raise InvalidDimension(f"B and C must have the same shape, "
                                   f"got {b.shape} and {c.shape}.")
        if side is Side.LEFT and N != M:
            raise InvalidDimension(f"A is {a.shape}, but B has {M} rows.")
        if side is Side.RIGHT and N != Nb:
            raise InvalidDimension(f"A is {a.shape}, but B has {Nb} columns.")

        if c.size == 0:
            return

        # Mirror the referenced triangle into a full matrix
        t = _triangle(a, uplo)
        k = 1 if uplo is Uplo.UPPER else -1
        strict = np.triu(t, k) if uplo is Uplo.UPPER else np.tril(t, k)
        if hermitian:
            d = np.diag_indices(N)
            t[d] = t[d].real
            s = t + strict.conj().T
        else:
            s = t + strict.T

        prod = alpha * (s @ b) if side is Side.LEFT else alpha * (b @ s)

        if beta == 0:
            c[...] = prod
        else:
            c[...] = prod + beta * c

    def symm(self, side, uplo, alpha, a, b, beta, c):
        """Symmetric matrix multiply, in place on `c`.

        .. math::
            C := \\alpha A B + \\beta C \\quad \\text{or} \\quad
            C := \\alpha B A + \\beta C

        where only the `uplo` triangle of `a` is referenced.
        """
        self._symmetric_multiply(side, uplo, alpha, a, b, beta, c,
                                 hermitian=False)

    def hemm(self, side, uplo, alpha, a, b, beta, c):
        """Hermitian matrix multiply, in place on `c`.

        The imaginary part of the diagonal of `a` is assumed to be zero.
        """
        self._symmetric_multiply(side, uplo, alpha, a, b, beta, c,
                                 hermitian=True)

    def _check_triangular_operands(self, side, a, b):
        N = _check_square(a, 'A')
        _check_matrix(b, 'B')
        M, Nb = b.shape
        if side is Side.LEFT and N != M:
            raise InvalidDimension(f"A is {a.shape}, but B has {M} rows.")
        if side is Side.RIGHT and N != Nb:
            raise InvalidDimension(f"A is {a.shape}, but B has {Nb} columns.")

    def trmm(self, side, uplo, trans, diag, alpha, a, b):
        """Triangular matrix multiply, in place on `b`.

        .. math::
            B := \\alpha op(A) B \\quad \\text{or} \\quad
            B := \\alpha B op(A)
        """
        side = _coerce(Side, side)
        uplo = _coerce(Uplo, uplo)
        trans = _coerce(Transpose, trans)
        diag = _coerce(Diag, diag)
        self._check_triangular_operands(side, a, b)

        if b.size == 0:
            return

        t = _op(_triangle(a, uplo, diag), trans)
        if side is Side.LEFT:
            b[...] = alpha * (t @ b)
        else:
            b[...] = alpha * (b @ t)

    def trsm(self, side, uplo, trans, diag, alpha, a, b):
        """Triangular solve with multiple right-hand sides, in place on `b`.

        Solves :math:`op(A) X = \\alpha B` if `side` is ``'L'``, or
        :math:`X op(A) = \\alpha B` if `side` is ``'R'``, and overwrites `b`
        with :math:`X`.
        """
        side = _coerce(Side, side)
        uplo = _coerce(Uplo, uplo)
        trans = _coerce(Transpose, trans)
        diag = _coerce(Diag, diag)
        self._check_triangular_operands(side, a, b)

        if b.size == 0:
            return

        t = _triangle(a, uplo, diag)
        lower = uplo is Uplo.LOWER
        rhs = alpha * b

        if side is Side.LEFT:
            x = la.solve_triangular(t, rhs, trans=trans.value, lower=lower,
                                    check_finite=False)
            b[...] = x
        else:
            # X op(A) = B  <=>  op(A)^T X^T = B^T
            match trans:
                case Transpose.NO_TRANS:
                    x = la.solve_triangular(t, rhs.T, trans='T', lower=lower,
                                            check_finite=False)
                case Transpose.TRANS:
                    x = la.solve_triangular(t, rhs.T, trans='N', lower=lower,
                                            check_finite=False)
                case Transpose.CONJ_TRANS:
                    x = la.solve_triangular(t.conj(), rhs.T, trans='N',
                                            lower=lower, check_finite=False)
            b[...] = x.T


# =============================================================================
# =============================================================================
