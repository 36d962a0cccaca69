"""Top-level package for the exam flow layout engine.

Provides subpackages:
- exam_flow.core – content models, schema validation, JSON serialization
- exam_flow.layout – height estimation, HTML splitting, pagination
"""


def _get_version() -> str:
    """Get version from importlib.metadata (installed) or fall back to dev."""
    from importlib.metadata import PackageNotFoundError, version as pkg_version

    try:
        return pkg_version("exam-flow")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()
__all__: list[str] = ["__version__"]
