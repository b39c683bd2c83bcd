#!/usr/bin/env python3
# =============================================================================
#     File: _storage.py
#  Created: 2025-07-14 11:05
#   Author: Bernie Roesler
#
"""
Band storage model for symmetric, Hermitian and triangular band matrices.

A matrix of order `N` with `kd` super- (or sub-) diagonals is stored row by
row in a flat array `ab` with row stride `ldab >= kd + 1`:

.. code-block:: python

    # uplo == 'U', diagonal at offset 0
    A[i, j] == ab[i*ldab + j - i]         # i <= j <= min(N-1, i+kd)

    # uplo == 'L', diagonal at offset kd
    A[i, j] == ab[i*ldab + kd + j - i]    # max(0, i-kd) <= j <= i

Any other entry of `ab` is padding and is never referenced.
"""
# =============================================================================

import numpy as np

from numpy.lib.stride_tricks import as_strided

from .level3 import InvalidDimension, Uplo


def _coerce_uplo(uplo):
    try:
        return Uplo(str(getattr(uplo, 'value', uplo)).upper())
    except ValueError:
        raise ValueError(f"uplo must be 'U' or 'L', got {uplo!r}.") from None


def check_band_shape(uplo, N, kd, ab, ldab, writeable=True):
    """Validate the shape parameters of a band matrix.

    Parameters
    ----------
    uplo : str or Uplo
        ``'U'`` or ``'L'``.
    N : int
        Order of the matrix.
    kd : int
        Number of super- or sub-diagonals.
    ab : (K,) ndarray
        Band storage buffer of float or complex dtype.
    ldab : int
        Row stride of `ab`.
    writeable : bool, optional
        If True (default), `ab` must also be writeable.

    Returns
    -------
    uplo : Uplo
        The normalized storage flag.

    Raises
    ------
    InvalidDimension
        If the parameters do not describe a band matrix that fits in `ab`.
    """
    uplo = _coerce_uplo(uplo)

    if N < 0:
        raise InvalidDimension(f"N must be non-negative, got {N}.")
    if kd < 0:
        raise InvalidDimension(f"kd must be non-negative, got {kd}.")
    if N > 0 and kd >= N:
        raise InvalidDimension(f"kd must be less than N, got kd={kd}, N={N}.")
    if ldab < kd + 1:
        raise InvalidDimension(f"ldab must be at least kd + 1 = {kd + 1}, "
                               f"got {ldab}.")
    if not isinstance(ab, np.ndarray) or ab.ndim != 1:
        raise InvalidDimension("ab must be a 1-D numpy array.")
    if ab.dtype.kind not in 'fc':
        raise InvalidDimension(f"ab must have a float or complex dtype, "
                               f"got {ab.dtype}.")
    if writeable and not ab.flags.writeable:
        raise InvalidDimension("ab must be writeable.")
    if N > 0 and ab.size < (N - 1) * ldab + kd + 1:
        raise InvalidDimension(f"ab has {ab.size} elements, but at least "
                               f"{(N - 1) * ldab + kd + 1} are required.")
    return uplo


def band_block(ab, offset, M, N, ld):
    r"""Return an (M, N) strided view of `ab` starting at `offset`.

    With ``ld == ldab - 1`` the view addresses a dense block of the band
    matrix: element ``[r, c]`` of the view is ``ab[offset + r*ld + c]``.
    Only the part of the block that lies inside the band is meaningful; the
    rest of the view aliases other entries of `ab`.

    Parameters
    ----------
    ab : (K,) ndarray
        Band storage buffer.
    offset : int
        Index of the ``[0, 0]`` element of the block.
    M, N : int
        Shape of the block.
    ld : int
        Row stride of the block, in elements.

    Returns
    -------
    result : (M, N) ndarray
        A writeable view of `ab`.

    Raises
    ------
    InvalidDimension
        If any element of the view would lie outside of `ab`.
    """
    if M < 0 or N < 0 or ld < 0 or offset < 0:
        raise InvalidDimension(f"Invalid block: offset={offset}, "
                               f"shape={(M, N)}, ld={ld}.")

    if M > 0 and N > 0 and offset + (M - 1) * ld + (N - 1) >= ab.size:
        raise InvalidDimension(f"Block at offset {offset} with shape {(M, N)} "
                               f"and ld {ld} exceeds buffer of size "
                               f"{ab.size}.")

    base = ab[offset:]
    s = ab.strides[0]
    return as_strided(base, shape=(M, N), strides=(ld * s, s), writeable=True)


def band_mask(uplo, N, kd, ldab, size=None):
    """Return a boolean mask of the entries of `ab` inside the stored triangle.

    Parameters
    ----------
    uplo : str or Uplo
        ``'U'`` or ``'L'``.
    N, kd, ldab : int
        Band shape parameters.
    size : int, optional
        Length of the mask. Defaults to ``N * ldab``.

    Returns
    -------
    mask : (size,) ndarray of bool
        True at every referenced element of the band buffer.
    """
    uplo = _coerce_uplo(uplo)
    size = N * ldab if size is None else size
    mask = np.zeros(size, dtype=bool)
    for i in range(N):
        if uplo is Uplo.UPPER:
            m = min(kd, N - 1 - i)
            mask[i*ldab:i*ldab + m + 1] = True
        else:
            m = min(kd, i)
            mask[i*ldab + kd - m:i*ldab + kd + 1] = True
    return mask


def band_to_dense(uplo, N, kd, ab, ldab, hermitian=True):
    """Expand a band matrix into a dense (N, N) array.

    Parameters
    ----------
    uplo : str or Uplo
        ``'U'`` or ``'L'``.
    N, kd : int
        Order and bandwidth of the matrix.
    ab : (K,) ndarray
        Band storage buffer.
    ldab : int
        Row stride of `ab`.
    hermitian : bool, optional
        If True (default), mirror the stored triangle (conjugated for complex
        dtypes) to build the full symmetric or Hermitian matrix. If False,
        return the stored triangle only, *e.g.* a Cholesky factor.

    Returns
    -------
    A : (N, N) ndarray
        The dense matrix.
    """
    uplo = check_band_shape(uplo, N, kd, ab, ldab, writeable=False)
    A = np.zeros((N, N), dtype=ab.dtype)

    for i in range(N):
        if uplo is Uplo.UPPER:
            m = min(kd, N - 1 - i)
            A[i, i:i + m + 1] = ab[i*ldab:i*ldab + m + 1]
        else:
            m = min(kd, i)
            A[i, i - m:i + 1] = ab[i*ldab + kd - m:i*ldab + kd + 1]

    if hermitian:
        if uplo is Uplo.UPPER:
            A += np.triu(A, 1).conj().T
        else:
            A += np.tril(A, -1).conj().T

    return A


def dense_to_band(uplo, A, kd, ldab=None, dtype=None):
    """Pack the `uplo` triangle of a dense matrix into band storage.

    Entries of `A` outside of the band are ignored.

    Parameters
    ----------
    uplo : str or Uplo
        ``'U'`` or ``'L'``.
    A : (N, N) array_like
        Dense matrix.
    kd : int
        Number of super- or sub-diagonals to keep.
    ldab : int, optional
        Row stride of the result. Defaults to ``kd + 1``.
    dtype : dtype, optional
        Data type of the result. Defaults to the data type of `A`, promoted
        to at least ``np.float64``.

    Returns
    -------
    ab : (N * ldab,) ndarray
        Band storage buffer, with zero padding.
    """
    A = np.asarray(A)

    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise InvalidDimension(f"A must be square, got shape {A.shape}.")

    N = A.shape[0]
    ldab = kd + 1 if ldab is None else ldab
    if dtype is None:
        dtype = np.result_type(A.dtype, np.float64)
    ab = np.zeros(N * ldab, dtype=dtype)
    uplo = check_band_shape(uplo, N, kd, ab, ldab)

    for i in range(N):
        if uplo is Uplo.UPPER:
            m = min(kd, N - 1 - i)
            ab[i*ldab:i*ldab + m + 1] = A[i, i:i + m + 1]
        else:
            m = min(kd, i)
            ab[i*ldab + kd - m:i*ldab + kd + 1] = A[i, i - m:i + 1]

    return ab


def band_max_diff(uplo, N, kd, ab, other, ldab):
    """Compute the max-norm distance of two band matrices.

    Only the stored triangle is compared.

    Returns
    -------
    result : float
        :math:`\\max |ab_{ij} - other_{ij}|` over the stored entries, or 0 if
        the matrices are empty.
    """
    uplo = check_band_shape(uplo, N, kd, ab, ldab, writeable=False)
    check_band_shape(uplo, N, kd, other, ldab, writeable=False)

    if N == 0:
        return 0.0

    size = min(ab.size, other.size)
    mask = band_mask(uplo, N, kd, ldab, size=size)
    return float(np.max(np.abs(ab[:size][mask] - other[:size][mask])))


# =============================================================================
# =============================================================================
