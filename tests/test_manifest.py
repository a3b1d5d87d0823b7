"""serverless.yml loading and emulator configuration"""
import textwrap

import pytest

from local_invoke.config import EmulatorConfig
from local_invoke.exceptions import ManifestError
from local_invoke.manifest import DEFAULT_TIMEOUT, ServiceManifest, load_manifest

SERVERLESS_YML = textwrap.dedent("""
    service: key-service
    plugins:
      - serverless-offline
    provider:
      name: aws
      runtime: python3.11
      stage: staging
      timeout: 10
    functions:
      createKey:
        handler: handlers.create_key
        description: Create a key
        role: arn:aws:iam::456645664566:role/keys
        environment:
          TABLE: keys
      listKeys:
        handler: handlers.list_keys
        timeout: 2
    resources:
      Resources:
        KeysTable:
          Type: AWS::DynamoDB::Table
          Properties:
            TableName: !Sub "${AWS::StackName}-keys"
        KeysArn:
          Value: !GetAtt [KeysTable, Arn]
""")


@pytest.fixture
def manifest_path(tmp_path):
    path = tmp_path / "serverless.yml"
    path.write_text(SERVERLESS_YML)
    return path


def test_load_manifest(manifest_path):
    manifest = load_manifest(manifest_path)

    assert manifest.service == "key-service"
    assert manifest.provider.stage == "staging"
    assert manifest.provider.timeout == 10
    assert list(manifest.functions) == ["createKey", "listKeys"]

    create_key = manifest.functions["createKey"]
    assert create_key.handler == "handlers.create_key"
    assert create_key.description == "Create a key"
    assert create_key.environment == {"TABLE": "keys"}
    assert manifest.resources["Resources"]["KeysArn"]["Value"] == ["KeysTable", "Arn"]


def test_timeout_for(manifest_path):
    manifest = load_manifest(manifest_path)

    assert manifest.timeout_for("createKey") == 10
    assert manifest.timeout_for("listKeys") == 2


def test_provider_timeout_defaults_to_six():
    manifest = ServiceManifest.from_dict({"service": "s", "functions": {"f": {"handler": "h.f"}}})

    assert manifest.provider.timeout == DEFAULT_TIMEOUT == 6
    assert manifest.timeout_for("f") == 6
    assert manifest.provider.stage is None


def test_missing_manifest(tmp_path):
    with pytest.raises(ManifestError):
        load_manifest(tmp_path / "serverless.yml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "serverless.yml"
    path.write_text("service: [unclosed")

    with pytest.raises(ManifestError):
        load_manifest(path)


@pytest.mark.parametrize("raw", [
    ["not", "a", "mapping"],
    {"functions": {}},
    {"service": "s", "functions": {"f": {"description": "no handler"}}},
    {"service": "s", "functions": {"f": "handlers.f"}},
])
def test_structural_errors(raw):
    with pytest.raises(ManifestError):
        ServiceManifest.from_dict(raw)


def test_manifest_is_immutable(manifest_path):
    manifest = load_manifest(manifest_path)

    with pytest.raises(TypeError):
        manifest.functions["new"] = None


def test_stage_precedence(manifest_path, tmp_path):
    manifest = load_manifest(manifest_path)

    assert EmulatorConfig.from_manifest(manifest, tmp_path, environ={}).stage == "staging"
    assert EmulatorConfig.from_manifest(manifest, tmp_path, environ={"STAGE": "qa"}).stage == "qa"

    bare = ServiceManifest.from_dict({"service": "s", "functions": {}})
    assert EmulatorConfig.from_manifest(bare, tmp_path, environ={}).stage == "dev"


def test_config_from_environment(manifest_path, tmp_path):
    config = EmulatorConfig.from_manifest(
        load_manifest(manifest_path),
        tmp_path,
        environ={"PORT": "6000", "FUNCTION_INVOKE_TIMEOUT": "1.5"},
    )

    assert config.is_local
    assert config.base_dir == tmp_path.resolve()
    assert config.port == 6000
    assert config.invoke_wait_timeout == 1.5


def test_config_defaults(manifest_path, tmp_path):
    config = EmulatorConfig.from_manifest(load_manifest(manifest_path), tmp_path, environ={})

    assert config.host == "0.0.0.0"
    assert config.port == 5050
    assert config.invoke_wait_timeout is None
