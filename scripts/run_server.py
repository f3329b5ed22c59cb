"""Run the development server.

Usage: APP_ENV=development python scripts/run_server.py [--host 0.0.0.0] [--port 5000]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.hr_workflow.hr_workflow.main import create_app


def main() -> None:
    parser = argparse.ArgumentParser(description="HR workflow API (development server)")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5000)
    args = parser.parse_args()

    app = create_app()
    app.run(host=args.host, port=args.port, debug=app.config["DEBUG"])


if __name__ == "__main__":
    main()
