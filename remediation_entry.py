"""!
@brief Shim entry point for Retail Office Remediation.
@details Makes the package in ``src/`` importable from a plain checkout and
dispatches to :func:`retail_remediation.main.main`, so the scripts can be
deployed to a device as a directory and run with
``python remediation_entry.py remediate`` or
``python remediation_entry.py detect --hours 24``.
"""
from __future__ import annotations

import os
import sys

__all__ = ["main"]

_REPO_ROOT = os.path.dirname(__file__)
_SRC_PATH = os.path.join(_REPO_ROOT, "src")


def _prepend_src_to_sys_path() -> None:
    if os.path.isdir(_SRC_PATH) and _SRC_PATH not in sys.path:
        sys.path.insert(0, _SRC_PATH)


def main() -> int:
    """!
    @brief Invoke the package entry point after preparing ``sys.path``.
    @returns Exit status propagated from :func:`retail_remediation.main.main`.
    """

    _prepend_src_to_sys_path()
    from retail_remediation.main import main as package_main

    return package_main()


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main())
