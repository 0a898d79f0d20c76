"""
ai-dev-workflow: AI-guided development workflow CLI.

File: src/ai_dev_workflow/__init__.py

Purpose
- Package root. Exposes the version and nothing else.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
