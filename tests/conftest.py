import os
import sys

# Ensure the project root is on the module search path when the package is not
# installed so that ``import loraadr`` succeeds during test collection.
ROOT_DIR = os.path.dirname(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Figures are rendered off-screen
os.environ.setdefault("MPLBACKEND", "Agg")
