from __future__ import annotations

"""Application version lookup used by per-version gating."""

import os
from importlib import metadata

from execution_gate.errors import MissingVersionError

VERSION_ENV_VAR = "EXECUTION_GATE_APP_VERSION"


def resolve_app_version(version: str | None = None, *, distribution: str | None = None) -> str:
    """Resolve the running application's version string.

    Resolution order:
    1) explicit `version` argument
    2) `EXECUTION_GATE_APP_VERSION` from environment
    3) installed metadata of `distribution`
    Blank strings count as missing.
    """
    if version and version.strip():
        return version.strip()

    explicit = (os.getenv(VERSION_ENV_VAR) or "").strip()
    if explicit:
        return explicit

    if distribution:
        try:
            installed = metadata.version(distribution)
        except metadata.PackageNotFoundError as e:
            raise MissingVersionError(
                f"Distribution {distribution!r} is not installed; cannot read its version."
            ) from e
        if installed and installed.strip():
            return installed.strip()

    raise MissingVersionError(
        f"No application version available. Pass one explicitly, set {VERSION_ENV_VAR}, "
        "or name an installed distribution."
    )
