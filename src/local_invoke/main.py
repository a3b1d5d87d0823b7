"""
LocalInvoke - Lambda invoke emulation
Serves every function in serverless.yml at the path the AWS SDK invokes:
POST /2015-03-31/functions/<function_name>/invocations
"""
import json
import logging
import os
from pathlib import Path
from typing import Optional

from flask import Flask, Response, g

from . import custom_logger  # noqa: F401 configures the root logger
from .arbiter import invoke
from .body import normalize_body
from .config import EmulatorConfig
from .context import build_context
from .manifest import MANIFEST_FILENAME, load_manifest
from .outcome import Outcome
from .registry import BoundHandler, HandlerRegistry

logger = logging.getLogger(__name__)

INVOKE_PATH = '/2015-03-31/functions/{function_name}/invocations'


def render_result(result) -> Response:
    """200 response carrying whatever the handler produced"""
    if result is None:
        return Response(status=200)
    if isinstance(result, bytes):
        return Response(result, status=200, mimetype='application/octet-stream')
    if isinstance(result, str):
        return Response(result, status=200, mimetype='text/plain')
    return Response(json.dumps(result, default=str), status=200, mimetype='application/json')


def render_outcome(outcome: Outcome) -> Response:
    if outcome.ok:
        return render_result(outcome.value)
    return Response(status=500)


def make_invoke_view(bound: BoundHandler, config: EmulatorConfig):
    """View function for one bound handler"""
    timeout = config.manifest.timeout_for(bound.function_name)

    def invoke_function():
        event = g.get('body')
        context = build_context(bound.function_name, timeout, region=config.region)
        outcome = invoke(bound, event, context, wait_timeout=config.invoke_wait_timeout)
        return render_outcome(outcome)

    return invoke_function


def create_app(config: EmulatorConfig, registry: Optional[HandlerRegistry] = None) -> Flask:
    """Build the Flask app with one invoke route per resolvable function"""
    if registry is None:
        registry = HandlerRegistry.from_config(config)

    app = Flask(__name__)
    app.config['EMULATOR'] = config
    app.config['REGISTRY'] = registry
    app.before_request(normalize_body)

    for bound in registry:
        path = INVOKE_PATH.format(function_name=bound.function_name)
        app.add_url_rule(
            path,
            endpoint=f"invoke:{bound.function_name}",
            view_func=make_invoke_view(bound, config),
            methods=['POST'],
        )
        logger.debug(f"Bound POST {path}")

    return app


def listen_address(config: EmulatorConfig) -> str:
    host = 'localhost' if config.host in ('0.0.0.0', '::') else config.host
    return f"http://{host}:{config.port}"


def main():
    manifest_path = Path(os.getenv('MANIFEST_PATH', Path(os.getcwd()) / MANIFEST_FILENAME))
    manifest = load_manifest(manifest_path)
    config = EmulatorConfig.from_manifest(manifest)
    logger.info(f"Service {manifest.service} running locally in stage {config.stage}")

    registry = HandlerRegistry.from_config(config)
    app = create_app(config, registry)

    logger.info(f"Listening with {len(registry)} available functions. Please point your AWS SDK endpoint to {listen_address(config)}")
    app.run(host=config.host, port=config.port, threaded=True)


if __name__ == '__main__':
    main()
