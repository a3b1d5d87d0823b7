"""
Service manifest loading
Reads a serverless.yml into immutable dataclasses. Only the fields the
emulator acts on are typed; the rest are carried through untouched.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml

from .exceptions import ManifestError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 6  # seconds
MANIFEST_FILENAME = "serverless.yml"


@dataclass(frozen=True)
class FunctionDefinition:
    """One entry of the manifest's ``functions`` block"""
    name: str
    handler: str
    description: Optional[str] = None
    role: Optional[str] = None
    environment: Mapping[str, Any] = field(default_factory=dict)
    timeout: Optional[float] = None

    @classmethod
    def from_dict(cls, name: str, raw: Dict[str, Any]) -> "FunctionDefinition":
        if not isinstance(raw, dict):
            raise ManifestError(f"Function {name} must be a mapping, got {type(raw).__name__}")
        handler = raw.get("handler")
        if not isinstance(handler, str) or not handler:
            raise ManifestError(f"Function {name} has no handler")
        return cls(
            name=name,
            handler=handler,
            description=raw.get("description"),
            role=raw.get("role"),
            environment=MappingProxyType(dict(raw.get("environment") or {})),
            timeout=raw.get("timeout"),
        )


@dataclass(frozen=True)
class ProviderSettings:
    name: str = "aws"
    runtime: Optional[str] = None
    stage: Optional[str] = None
    region: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "ProviderSettings":
        raw = raw or {}
        return cls(
            name=raw.get("name", "aws"),
            runtime=raw.get("runtime"),
            stage=raw.get("stage"),
            region=raw.get("region"),
            timeout=raw.get("timeout") or DEFAULT_TIMEOUT,
        )


@dataclass(frozen=True)
class ServiceManifest:
    service: str
    provider: ProviderSettings
    functions: Mapping[str, FunctionDefinition]
    plugins: tuple = ()
    custom: Mapping[str, Any] = field(default_factory=dict)
    package: Mapping[str, Any] = field(default_factory=dict)
    resources: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ServiceManifest":
        if not isinstance(raw, dict):
            raise ManifestError("Manifest must be a mapping at the top level")

        service = raw.get("service")
        # serverless allows `service: {name: ...}` as well as a plain string
        if isinstance(service, dict):
            service = service.get("name")
        if not service:
            raise ManifestError("Manifest has no service name")

        functions = {
            name: FunctionDefinition.from_dict(name, definition)
            for name, definition in (raw.get("functions") or {}).items()
        }
        return cls(
            service=str(service),
            provider=ProviderSettings.from_dict(raw.get("provider")),
            functions=MappingProxyType(functions),
            plugins=tuple(raw.get("plugins") or ()),
            custom=MappingProxyType(dict(raw.get("custom") or {})),
            package=MappingProxyType(dict(raw.get("package") or {})),
            resources=MappingProxyType(dict(raw.get("resources") or {})),
        )

    def timeout_for(self, function_name: str) -> float:
        """Function timeout if declared, else the provider's"""
        definition = self.functions.get(function_name)
        if definition is not None and definition.timeout:
            return definition.timeout
        return self.provider.timeout or DEFAULT_TIMEOUT


class _ManifestLoader(yaml.SafeLoader):
    """SafeLoader that tolerates CloudFormation short-form tags (!Ref, !GetAtt, ...)"""


def _construct_unknown_tag(loader, tag_suffix, node):
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_scalar(node)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node)
    return loader.construct_mapping(node)


_ManifestLoader.add_multi_constructor("!", _construct_unknown_tag)


def load_manifest(path) -> ServiceManifest:
    """Read and validate a serverless.yml"""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.load(f, Loader=_ManifestLoader) or {}
    except FileNotFoundError as e:
        raise ManifestError(f"Manifest not found at {path}") from e
    except yaml.YAMLError as e:
        raise ManifestError(f"Error parsing manifest {path}: {e}") from e

    manifest = ServiceManifest.from_dict(raw)
    logger.info(f"Loaded service {manifest.service} with {len(manifest.functions)} functions from {path}")
    return manifest
