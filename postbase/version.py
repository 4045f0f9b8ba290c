import functools

import importlib_resources


@functools.lru_cache
def get_version() -> str:
    """The installed version, as recorded in the VERSION file shipped inside
    the package."""
    version_file = importlib_resources.files("postbase").joinpath("VERSION")
    return version_file.read_text(encoding="utf-8").strip()
