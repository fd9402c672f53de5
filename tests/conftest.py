import sys
import os

# Ensure src/ is on sys.path so the 'cytetype' package is importable without install
SRC = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if SRC not in sys.path:
    sys.path.insert(0, SRC)
