# Put src/ on sys.path so the *_spec.py modules import paylink without an install.
from pathlib import Path
import sys

SRC = Path(__file__).resolve().parent / "src"
if SRC.is_dir():
    sys.path.insert(0, str(SRC))
