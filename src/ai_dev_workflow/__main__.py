"""Module entrypoint for ``python -m ai_dev_workflow``."""

from __future__ import annotations

from ai_dev_workflow.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
