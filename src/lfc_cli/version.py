"""Version management for latex-fast-compile."""

import re
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

# Build-time version constant (injected by release builds)
__BUILD_VERSION__ = None


def get_version() -> str:
    """
    Get the current version.

    Tries the build-time constant, then the installed distribution metadata,
    then pyproject.toml for a source checkout.

    Returns:
        str: Version string
    """
    if __BUILD_VERSION__:
        return __BUILD_VERSION__

    try:
        return version("latex-fast-compile")
    except PackageNotFoundError:
        pass

    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        content = pyproject_path.read_text(encoding='utf-8')
        match = re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE)
        if match:
            return match.group(1)

    return "unknown"


__version__ = get_version()
