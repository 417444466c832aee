import os

# non-interactive backend for the chart tests
os.environ.setdefault("MPLBACKEND", "Agg")
