from pathlib import Path

import pytest

from local_invoke.config import EmulatorConfig
from local_invoke.main import create_app
from local_invoke.manifest import ServiceManifest

HANDLERS_DIR = Path(__file__).parent / "handlers"


@pytest.fixture
def handlers_dir():
    return HANDLERS_DIR


@pytest.fixture
def make_config(handlers_dir):
    """Build an EmulatorConfig for a manifest whose functions live in tests/handlers"""
    def _make(functions, provider=None, **overrides):
        manifest = ServiceManifest.from_dict({
            "service": "local-invoke-tests",
            "provider": provider or {"name": "aws", "stage": "test"},
            "functions": functions,
        })
        return EmulatorConfig(manifest=manifest, base_dir=handlers_dir, **overrides)
    return _make


@pytest.fixture
def make_client(make_config):
    def _make(functions, provider=None, **overrides):
        app = create_app(make_config(functions, provider, **overrides))
        app.testing = True
        return app.test_client()
    return _make


def invoke_path(function_name):
    return f"/2015-03-31/functions/{function_name}/invocations"


@pytest.fixture
def path_for():
    return invoke_path
