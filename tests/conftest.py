import os

# Headless plotting for the visualisation and CLI tests.
os.environ.setdefault("MPLBACKEND", "Agg")
