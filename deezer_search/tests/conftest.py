import os
import sys
import pytest


def _ensure_project_root_on_sys_path() -> None:
    here = os.path.dirname(__file__)
    project_root = os.path.abspath(os.path.join(here, "..", ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


_ensure_project_root_on_sys_path()


@pytest.fixture(autouse=True)
def _clear_deezer_env():
    """Ensure DEEZER_* settings from a developer shell or .env do not leak into tests."""
    keys = [k for k in os.environ if k.startswith('DEEZER_')]
    backup = {k: os.environ.get(k) for k in keys}
    for k in keys:
        os.environ.pop(k, None)
    try:
        yield
    finally:
        for k in [k for k in os.environ if k.startswith('DEEZER_')]:
            os.environ.pop(k, None)
        os.environ.update(backup)
