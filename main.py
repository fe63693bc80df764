"""Wellcast v1.0 — CLI entry point."""

import sys

from wellcast import forecast_file, generate_report, load_config
from wellcast.utils import setup_logging

if __name__ == "__main__":
    setup_logging()
    path = sys.argv[1] if len(sys.argv) > 1 else "trend_data.json"
    cfg = load_config(sys.argv[2]) if len(sys.argv) > 2 else None
    print(generate_report(forecast_file(path, cfg)))
