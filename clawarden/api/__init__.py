"""Clawarden HTTP API layer.

Usage
-----
Create and run the application::

    from clawarden.api import create_app

    app = create_app()              # health-only mode
    app = create_app(dependencies)  # full mode with CLA endpoints

"""

from clawarden.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
