#!/usr/bin/env python3
# =============================================================================
#     File: conftest.py
#  Created: 2025-06-11 11:58
#   Author: Bernie Roesler
#
"""
Configuration file for pytest to set up the testing environment.
"""
# =============================================================================

import pytest


def pytest_addoption(parser):
    """Add command-line options for pytest."""
    parser.addoption(
        "--block-size",
        action="store",
        type=int,
        default=None,
        help="Block size for the blocked band Cholesky tests. "
             "Defaults to bandchol.tuned_block_size."
    )


@pytest.fixture
def block_size(request):
    """The block size given on the command line, or None."""
    return request.config.getoption('--block-size')

# =============================================================================
# =============================================================================
