"""Entry point for running the Cloudship API under uvicorn.

Usage:
    cloudship-serve --host 0.0.0.0 --port 8080
"""

import argparse


def parse_serve_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse serve-mode arguments (host, port, log level)."""
    parser = argparse.ArgumentParser(description='Cloudship API server')
    parser.add_argument('--host', default='127.0.0.1', help='Bind address')
    parser.add_argument('--port', type=int, default=8000, help='Listen port')
    parser.add_argument('--log-level', default='info', help='Uvicorn log level')
    return parser.parse_args(args)


def main(argv: list[str] | None = None) -> None:
    """Start the API with a single worker.

    The rate limiter lives on app.state, so counts are per process.
    """
    serve_args = parse_serve_args(argv)
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host=serve_args.host,
        port=serve_args.port,
        workers=1,
        log_level=serve_args.log_level,
        lifespan="on",
    )
