"""Contributor License Agreement enforcement for GitHub organisations.

Clawarden decides whether pull requests come from external contributors,
asks those contributors to sign the CLA, and clears the ``Pending CLA``
marker from every open pull request once a signature lands.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
