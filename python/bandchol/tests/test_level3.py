#!/usr/bin/env python3
# =============================================================================
#     File: test_level3.py
#  Created: 2025-07-17 13:02
#   Author: Bernie Roesler
#
"""
Unit tests for the dimension-checked dense kernels.
"""
# =============================================================================

import pytest
import numpy as np

from numpy.testing import assert_allclose, assert_array_equal

from bandchol import Diag, InvalidDimension, NumpyBlas, Side, Transpose, Uplo

ATOL = 1e-12

DTYPES = [np.float64, np.complex128]
TRANS = [Transpose.NO_TRANS, Transpose.TRANS, Transpose.CONJ_TRANS]


@pytest.fixture
def bi():
    return NumpyBlas()


@pytest.fixture
def rng():
    return np.random.default_rng(565656)


def random_matrix(rng, shape, dtype):
    A = rng.standard_normal(shape)
    if np.issubdtype(dtype, np.complexfloating):
        A = A + 1j * rng.standard_normal(shape)
    return A.astype(dtype)


def op(A, trans):
    """Reference implementation of op(A)."""
    match Transpose(trans):
        case Transpose.NO_TRANS:
            return A
        case Transpose.TRANS:
            return A.T
        case Transpose.CONJ_TRANS:
            return A.conj().T


def other_triangle(A, uplo):
    """Return the strict triangle of `A` opposite to `uplo`."""
    return np.tril(A, -1) if uplo == 'U' else np.triu(A, 1)


def triangle(A, uplo):
    return np.triu(A) if uplo == 'U' else np.tril(A)


# -----------------------------------------------------------------------------
#         Level 1 and 2
# -----------------------------------------------------------------------------
@pytest.mark.parametrize("dtype", DTYPES)
def test_dot(bi, rng, dtype):
    """Test the conjugated and unconjugated dot products."""
    x = random_matrix(rng, 7, dtype)
    y = random_matrix(rng, 7, dtype)
    assert_allclose(bi.dot(x, y), np.sum(x * y), atol=ATOL)
    assert_allclose(bi.dotc(x, y), np.sum(x.conj() * y), atol=ATOL)

    # strided vectors
    assert_allclose(bi.dotc(x[::2], y[1::2]),
                    np.sum(x[::2].conj() * y[1::2]), atol=ATOL)

    with pytest.raises(InvalidDimension):
        bi.dot(x, y[:3])
    with pytest.raises(InvalidDimension):
        bi.dotc(x.reshape(7, 1), y)


def test_scal(bi):
    """Test scaling a strided vector in place."""
    x = np.arange(10.0)
    bi.scal(2.0, x[::3])
    assert_array_equal(x, [0, 1, 2, 6, 4, 5, 12, 7, 8, 18])


@pytest.mark.parametrize("trans", TRANS)
@pytest.mark.parametrize("dtype", DTYPES)
def test_gemv(bi, rng, trans, dtype):
    """Test the general matrix-vector product."""
    A = random_matrix(rng, (4, 6), dtype)
    M, N = op(A, trans).shape
    x = random_matrix(rng, N, dtype)
    y = random_matrix(rng, M, dtype)

    expect = 2.0 * op(A, trans) @ x - 0.5 * y
    bi.gemv(trans, 2.0, A, x, -0.5, y)
    assert_allclose(y, expect, atol=ATOL)

    with pytest.raises(InvalidDimension):
        bi.gemv(trans, 1.0, A, np.ones(N + 1, dtype), 0.0, y)
    with pytest.raises(InvalidDimension):
        bi.gemv(trans, 1.0, A, x, 0.0, np.ones(M + 1, dtype))


@pytest.mark.parametrize("uplo", ['U', 'L'])
@pytest.mark.parametrize("trans", TRANS)
@pytest.mark.parametrize("diag", ['N', 'U'])
@pytest.mark.parametrize("dtype", DTYPES)
def test_trmv(bi, rng, uplo, trans, diag, dtype):
    """Test that trmv only references the `uplo` triangle."""
    N = 5
    A = random_matrix(rng, (N, N), dtype)
    x = random_matrix(rng, N, dtype)

    T = triangle(A, uplo)
    if diag == 'U':
        np.fill_diagonal(T, 1)
    expect = op(T, trans) @ x

    A[np.tril_indices(N, -1) if uplo == 'U' else np.triu_indices(N, 1)] \
        = np.nan
    bi.trmv(uplo, trans, diag, A, x)
    assert_allclose(x, expect, atol=ATOL)

    with pytest.raises(InvalidDimension):
        bi.trmv(uplo, trans, diag, A, np.ones(N - 1, dtype))
    with pytest.raises(InvalidDimension):
        bi.trmv(uplo, trans, diag, A[:, :-1], x[:-1])


@pytest.mark.parametrize("uplo", ['U', 'L'])
@pytest.mark.parametrize("dtype", DTYPES)
def test_syr_her(bi, rng, uplo, dtype):
    """Test the rank-1 updates of one triangle."""
    N = 6
    A = random_matrix(rng, (N, N), dtype)
    A = A + A.conj().T
    x = random_matrix(rng, N, dtype)

    S = A.copy()
    bi.syr(uplo, -0.5, x, S)
    expect = A - 0.5 * np.outer(x, x)
    assert_allclose(triangle(S, uplo), triangle(expect, uplo), atol=ATOL)
    assert_array_equal(other_triangle(S, uplo), other_triangle(A, uplo))

    H = A.copy()
    bi.her(uplo, -0.5, x, H)
    expect = A - 0.5 * np.outer(x, x.conj())
    assert_allclose(triangle(H, uplo), triangle(expect, uplo), atol=ATOL)
    assert_array_equal(other_triangle(H, uplo), other_triangle(A, uplo))
    assert_array_equal(np.diag(H).imag, 0)

    with pytest.raises(InvalidDimension):
        bi.syr(uplo, 1.0, x[:-1], S)
    with pytest.raises(InvalidDimension):
        bi.her(uplo, 1.0, x, S[:, :-1])


# -----------------------------------------------------------------------------
#         Level 3
# -----------------------------------------------------------------------------
@pytest.mark.parametrize("trans_a", TRANS)
@pytest.mark.parametrize("trans_b", TRANS)
@pytest.mark.parametrize("dtype", DTYPES)
def test_gemm(bi, rng, trans_a, trans_b, dtype):
    """Test the general matrix product for all transpose flags."""
    M, N, K = 3, 4, 5
    A = random_matrix(rng, (M, K) if trans_a == 'N' else (K, M), dtype)
    B = random_matrix(rng, (K, N) if trans_b == 'N' else (N, K), dtype)
    C = random_matrix(rng, (M, N), dtype)

    expect = 1.5 * op(A, trans_a) @ op(B, trans_b) + 2.0 * C
    bi.gemm(trans_a, trans_b, 1.5, A, B, 2.0, C)
    assert_allclose(C, expect, atol=ATOL)


def test_gemm_beta_zero(bi, rng):
    """Test that C is not read when beta is zero."""
    A = rng.standard_normal((3, 2))
    B = rng.standard_normal((2, 4))
    C = np.full((3, 4), np.nan)
    bi.gemm('N', 'N', 1.0, A, B, 0.0, C)
    assert_allclose(C, A @ B, atol=ATOL)


@pytest.mark.parametrize("a_shape, b_shape, c_shape", [
    ((3, 2), (3, 4), (3, 4)),   # inner dimensions
    ((3, 2), (2, 4), (4, 3)),   # C shape
    ((3,), (2, 4), (3, 4)),     # not a matrix
])
def test_gemm_invalid(bi, a_shape, b_shape, c_shape):
    """Test that mismatched operands raise InvalidDimension."""
    with pytest.raises(InvalidDimension):
        bi.gemm('N', 'N', 1.0, np.ones(a_shape), np.ones(b_shape), 0.0,
                np.ones(c_shape))


@pytest.mark.parametrize("uplo", ['U', 'L'])
@pytest.mark.parametrize("trans", ['N', 'T'])
def test_syrk(bi, rng, uplo, trans):
    """Test the symmetric rank-k update of one triangle."""
    N, K = 5, 3
    A = rng.standard_normal((N, K) if trans == 'N' else (K, N))
    C = rng.standard_normal((N, N))
    C0 = C.copy()

    expect = -1.0 * op(A, trans) @ op(A, trans).T + 0.5 * C0
    bi.syrk(uplo, trans, -1.0, A, 0.5, C)

    assert_allclose(triangle(C, uplo), triangle(expect, uplo), atol=ATOL)
    assert_array_equal(other_triangle(C, uplo), other_triangle(C0, uplo))

    with pytest.raises(InvalidDimension):
        bi.syrk(uplo, trans, 1.0, A, 1.0, C[:-1, :-1])


@pytest.mark.parametrize("uplo", ['U', 'L'])
@pytest.mark.parametrize("trans", ['N', 'C'])
def test_herk(bi, rng, uplo, trans):
    """Test the Hermitian rank-k update of one triangle."""
    N, K = 5, 3
    A = random_matrix(rng, (N, K) if trans == 'N' else (K, N), np.complex128)
    C = random_matrix(rng, (N, N), np.complex128)
    C = C + C.conj().T
    C0 = C.copy()

    opa = op(A, trans)
    expect = -1.0 * opa @ opa.conj().T + 0.5 * C0
    bi.herk(uplo, trans, -1.0, A, 0.5, C)

    assert_allclose(triangle(C, uplo), triangle(expect, uplo), atol=ATOL)
    assert_array_equal(other_triangle(C, uplo), other_triangle(C0, uplo))
    assert_array_equal(np.diag(C).imag, 0)

    with pytest.raises(ValueError):
        bi.herk(uplo, 'T', 1.0, A, 1.0, C)


@pytest.mark.parametrize("uplo", ['U', 'L'])
@pytest.mark.parametrize("trans", ['N', 'T'])
def test_syr2k_her2k(bi, rng, uplo, trans):
    """Test the rank-2k updates of one triangle."""
    N, K = 4, 6
    shape = (N, K) if trans == 'N' else (K, N)

    A = rng.standard_normal(shape)
    B = rng.standard_normal(shape)
    C = rng.standard_normal((N, N))
    C0 = C.copy()

    opa, opb = op(A, trans), op(B, trans)
    expect = 2.0 * (opa @ opb.T + opb @ opa.T) + C0
    bi.syr2k(uplo, trans, 2.0, A, B, 1.0, C)
    assert_allclose(triangle(C, uplo), triangle(expect, uplo), atol=ATOL)
    assert_array_equal(other_triangle(C, uplo), other_triangle(C0, uplo))

    htrans = 'N' if trans == 'N' else 'C'
    A = random_matrix(rng, shape, np.complex128)
    B = random_matrix(rng, shape, np.complex128)
    C = np.zeros((N, N), dtype=np.complex128)

    opa, opb = op(A, htrans), op(B, htrans)
    alpha = 1.0 - 2.0j
    expect = (alpha * opa @ opb.conj().T
              + np.conj(alpha) * opb @ opa.conj().T)
    bi.her2k(uplo, htrans, alpha, A, B, 0.0, C)
    assert_allclose(triangle(C, uplo), triangle(expect, uplo), atol=ATOL)

    with pytest.raises(InvalidDimension):
        bi.syr2k(uplo, trans, 1.0, A, B[:-1], 1.0, C)


@pytest.mark.parametrize("side", ['L', 'R'])
@pytest.mark.parametrize("uplo", ['U', 'L'])
@pytest.mark.parametrize("dtype", DTYPES)
def test_symm_hemm(bi, rng, side, uplo, dtype):
    """Test the symmetric and Hermitian multiplies read only one triangle."""
    M, N = 4, 3
    K = M if side == 'L' else N

    S = random_matrix(rng, (K, K), dtype)
    S = S + S.T
    H = random_matrix(rng, (K, K), dtype)
    H = H + H.conj().T
    B = random_matrix(rng, (M, N), dtype)
    C0 = random_matrix(rng, (M, N), dtype)

    for A, func in [(S, bi.symm), (H, bi.hemm)]:
        # Garbage in the unreferenced triangle must not leak into the result
        A_view = A.copy()
        A_view[other_triangle(np.ones((K, K)), uplo) != 0] = np.nan

        C = C0.copy()
        func(side, uplo, 2.0, A_view, B, 0.5, C)
        expect = 2.0 * (A @ B if side == 'L' else B @ A) + 0.5 * C0
        assert_allclose(C, expect, atol=ATOL)

    # beta == 0 does not read C
    C = np.full((M, N), np.nan, dtype=dtype)
    bi.symm(side, uplo, 1.0, S, B, 0.0, C)
    assert_allclose(C, S @ B if side == 'L' else B @ S, atol=ATOL)

    with pytest.raises(InvalidDimension):
        bi.symm(side, uplo, 1.0, S, B, 1.0, C[:-1])
    with pytest.raises(InvalidDimension):
        bi.hemm(side, uplo, 1.0, H[:-1, :-1], B, 1.0, C)


@pytest.mark.parametrize("side", ['L', 'R'])
@pytest.mark.parametrize("uplo", ['U', 'L'])
@pytest.mark.parametrize("trans", TRANS)
@pytest.mark.parametrize("diag", ['N', 'U'])
@pytest.mark.parametrize("dtype", DTYPES)
def test_trsm_trmm(bi, rng, side, uplo, trans, diag, dtype):
    """Test the triangular solve and multiply on either side."""
    N, K = 4, 3
    A = random_matrix(rng, (N, N), dtype)
    A[np.diag_indices(N)] += 4  # well-conditioned
    B = random_matrix(rng, (N, K) if side == 'L' else (K, N), dtype)

    T = triangle(A, uplo)
    if diag == 'U':
        np.fill_diagonal(T, 1)

    # The other triangle is never referenced
    A[np.tril_indices(N, -1) if uplo == 'U' else np.triu_indices(N, 1)] \
        = np.nan

    X = B.copy()
    bi.trsm(side, uplo, trans, diag, 2.0, A, X)
    if side == 'L':
        assert_allclose(op(T, trans) @ X, 2.0 * B, atol=ATOL)
    else:
        assert_allclose(X @ op(T, trans), 2.0 * B, atol=ATOL)

    Y = B.copy()
    bi.trmm(side, uplo, trans, diag, -1.0, A, Y)
    if side == 'L':
        assert_allclose(Y, -op(T, trans) @ B, atol=ATOL)
    else:
        assert_allclose(Y, -B @ op(T, trans), atol=ATOL)

    with pytest.raises(InvalidDimension):
        bi.trsm(side, uplo, trans, diag, 1.0, A, B.T.copy())
    with pytest.raises(InvalidDimension):
        bi.trmm(side, uplo, trans, diag, 1.0, A[:-1], B)


def test_enum_flags(bi, rng):
    """Test that enum members and lowercase strings are equivalent."""
    A = rng.standard_normal((3, 3))
    B = rng.standard_normal((3, 2))
    X = B.copy()
    Y = B.copy()
    bi.trsm(Side.LEFT, Uplo.LOWER, Transpose.TRANS, Diag.NON_UNIT, 1.0, A, X)
    bi.trsm('l', 'l', 't', 'n', 1.0, A, Y)
    assert_array_equal(X, Y)

    with pytest.raises(ValueError):
        bi.trsm('X', 'L', 'T', 'N', 1.0, A, Y)


def test_empty_operands(bi):
    """Test that empty operands are accepted and do nothing."""
    bi.gemm('N', 'N', 1.0, np.ones((0, 3)), np.ones((3, 2)), 0.0,
            np.ones((0, 2)))
    bi.syrk('U', 'N', 1.0, np.ones((0, 3)), 0.0, np.ones((0, 0)))
    bi.trsm('L', 'U', 'N', 'N', 1.0, np.ones((0, 0)), np.ones((0, 3)))
    bi.trmv('U', 'N', 'N', np.ones((0, 0)), np.ones(0))


# =============================================================================
# =============================================================================
