"""Entry point for running AI Key Validator as a module.

Usage:
    python -m ai_key_validator [OPTIONS] COMMAND [ARGS]...
"""

from ai_key_validator.cli.app import app

if __name__ == "__main__":
    app()
