"""
Convenience entry point for running schedulegrid as a module.

Usage: python -m schedulegrid [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
