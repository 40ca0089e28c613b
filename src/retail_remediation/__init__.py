"""!
@brief Retail Office Remediation package root.
@details Modules under this namespace detect retail Microsoft 365 installations
that conflict with volume-licensed deployments, gate on agent activity and OS
provisioning age, and report a single leveled summary line to the
device-management agent that invoked them.
"""

__all__ = [
    "main",
    "remediate",
    "detect_report",
    "detect",
    "intune",
    "os_age",
    "retail_uninstall",
    "summary",
    "registry_tools",
    "elevation",
    "exec_utils",
    "logging_ext",
    "constants",
    "version",
]
