"""Git hooks installation and management."""

from .install import (
    HookInstaller,
    InstallError,
    InstallOptions,
    InstallReport,
    render_template,
    write_readme,
)

__all__ = [
    "HookInstaller",
    "InstallError",
    "InstallOptions",
    "InstallReport",
    "render_template",
    "write_readme",
]
