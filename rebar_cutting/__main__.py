# rebar_cutting/__main__.py
# Package entrypoint so you can run:
#   python -m rebar_cutting --help
# and it will delegate to the JSON runner.
#
# Examples:
#   python -m rebar_cutting --job job.json
#   python -m rebar_cutting --job job.json --out out/ --mode true-dynamic

from __future__ import annotations

from .run_json import main

if __name__ == "__main__":
    main()
