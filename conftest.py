# Tests import the package as ``src.fixgrad``; keep the repository root importable.
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
