import os
import sys

# Ensure the repository root is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tests.helpers import make_board, make_piece, make_state

__all__ = [
    "make_board",
    "make_piece",
    "make_state",
]
