"""
Handler registry
Resolves every manifest function's "<module-path>.<export-name>" handler into
a callable. A function that fails to resolve is logged and left out; it never
stops the others from loading.
"""
import importlib.util
import inspect
import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType, ModuleType
from typing import Callable, Dict, Iterator, Optional

from .config import EmulatorConfig
from .exceptions import HandlerResolutionError
from .manifest import FunctionDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundHandler:
    function_name: str
    definition: FunctionDefinition
    handler: Callable
    accepts_callback: bool

    @property
    def logger(self) -> logging.Logger:
        return function_logger(self.function_name)


def function_logger(function_name: str) -> logging.Logger:
    return logging.getLogger(f"local_invoke.function.{function_name}")


def split_handler(handler: str):
    """'src/handlers.create_key' -> ('src/handlers', 'create_key')"""
    module_path, sep, export_name = handler.rpartition(".")
    if not sep or not module_path or not export_name:
        raise ValueError(f"handler must look like '<module-path>.<export-name>', got '{handler}'")
    return module_path, export_name


def accepts_callback(func: Callable) -> bool:
    """True when func can take a third positional (callback) argument"""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return False

    positional = 0
    for param in signature.parameters.values():
        if param.kind == param.VAR_POSITIONAL:
            return True
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 3


class HandlerRegistry:
    """Read-only table of function name -> BoundHandler, built once at startup"""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)
        self._handlers: Dict[str, BoundHandler] = {}
        self._modules: Dict[Path, ModuleType] = {}

    @classmethod
    def from_config(cls, config: EmulatorConfig) -> "HandlerRegistry":
        registry = cls(config.base_dir)
        for function_name, definition in config.manifest.functions.items():
            registry.register(function_name, definition)
        return registry

    def register(self, function_name: str, definition: FunctionDefinition) -> Optional[BoundHandler]:
        log = function_logger(function_name)
        try:
            handler = self._resolve(function_name, definition.handler)
        except HandlerResolutionError as e:
            log.error(f"Could not setup function {function_name}: {e}")
            return None

        bound = BoundHandler(
            function_name=function_name,
            definition=definition,
            handler=handler,
            accepts_callback=accepts_callback(handler),
        )
        self._handlers[function_name] = bound
        log.info(f"Discovered function {function_name} with handler {definition.handler}")
        return bound

    def _resolve(self, function_name: str, handler: str) -> Callable:
        try:
            module_path, export_name = split_handler(handler)
        except ValueError as e:
            raise HandlerResolutionError(function_name, handler, str(e)) from e

        module = self._load_module(function_name, handler, module_path)

        if not hasattr(module, export_name):
            raise HandlerResolutionError(function_name, handler, f"module has no export '{export_name}'")
        func = getattr(module, export_name)
        if not callable(func):
            raise HandlerResolutionError(function_name, handler, f"'{export_name}' is not a function")
        return func

    def _module_file(self, module_path: str) -> Optional[Path]:
        # both 'src/handlers' and 'src.handlers' point at src/handlers.py
        relative = module_path
        if "/" not in module_path and "\\" not in module_path:
            relative = module_path.replace(".", "/")
        candidate = (self.base_dir / relative).resolve()

        for path in (candidate.with_name(candidate.name + ".py"), candidate / "__init__.py"):
            if path.is_file():
                return path
        return None

    def _load_module(self, function_name: str, handler: str, module_path: str) -> ModuleType:
        path = self._module_file(module_path)
        if path is None:
            raise HandlerResolutionError(function_name, handler, f"cannot find module '{module_path}' in {self.base_dir}")

        if path in self._modules:
            return self._modules[path]

        # handler code imports its siblings the way it would from the Lambda task root
        base = str(self.base_dir)
        if base not in sys.path:
            sys.path.insert(0, base)

        module_name = "local_invoke_handler" + re.sub(r"\W", "_", str(path.with_suffix("")))
        search_locations = [str(path.parent)] if path.name == "__init__.py" else None
        spec = importlib.util.spec_from_file_location(module_name, path, submodule_search_locations=search_locations)
        if spec is None or spec.loader is None:
            raise HandlerResolutionError(function_name, handler, f"cannot load module from {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise HandlerResolutionError(function_name, handler, f"failed to load {path}: {type(e).__name__}: {e}") from e

        self._modules[path] = module
        logger.debug(f"Loaded handler module {path} as {module_name}")
        return module

    def get(self, function_name: str) -> Optional[BoundHandler]:
        return self._handlers.get(function_name)

    @property
    def handlers(self):
        return MappingProxyType(self._handlers)

    def __contains__(self, function_name) -> bool:
        return function_name in self._handlers

    def __iter__(self) -> Iterator[BoundHandler]:
        return iter(self._handlers.values())

    def __len__(self) -> int:
        return len(self._handlers)
