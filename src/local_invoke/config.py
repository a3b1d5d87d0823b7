"""
Emulator configuration
Built once at startup from the manifest and environment, then passed to
everything downstream. Nothing here is written back to os.environ.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .manifest import ServiceManifest

ACCOUNT_ID = "456645664566"
REGION = "ap-southeast-2"

DEFAULT_STAGE = "dev"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5050


@dataclass(frozen=True)
class EmulatorConfig:
    manifest: ServiceManifest
    base_dir: Path
    stage: str = DEFAULT_STAGE
    is_local: bool = True
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    invoke_wait_timeout: Optional[float] = None  # None waits forever

    @property
    def region(self) -> str:
        return self.manifest.provider.region or REGION

    @classmethod
    def from_manifest(cls, manifest: ServiceManifest, base_dir=None,
                      environ: Optional[Mapping[str, str]] = None) -> "EmulatorConfig":
        env = os.environ if environ is None else environ

        wait_timeout = env.get("FUNCTION_INVOKE_TIMEOUT")
        return cls(
            manifest=manifest,
            base_dir=Path(base_dir or os.getcwd()).resolve(),
            stage=env.get("STAGE") or manifest.provider.stage or DEFAULT_STAGE,
            host=env.get("HOST", DEFAULT_HOST),
            port=int(env.get("PORT", DEFAULT_PORT)),
            invoke_wait_timeout=float(wait_timeout) if wait_timeout else None,
        )
