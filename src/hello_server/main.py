"""FastAPI HTTPS listener - replies "Hello, World!" to every request."""

import argparse
import logging
import os
import ssl
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

RESPONSE_BODY = "Hello, World!"


class ListenerSettings(BaseModel):
    """Listener configuration."""

    host: str = Field(default="0.0.0.0", description="Address to bind")
    port: int = Field(default=3000, ge=1, le=65535, description="TCP port to bind")
    key_path: Path = Field(default=Path("server.key"), description="Server private key (PEM)")
    cert_path: Path = Field(default=Path("server.crt"), description="Server certificate (PEM)")
    key_password: Optional[str] = Field(None, description="Password for an encrypted server key")
    log_level: str = Field(default="info", description="uvicorn log level")

    @classmethod
    def from_env(cls) -> "ListenerSettings":
        """Build settings from HELLO_HTTPS_* environment variables."""
        env = {
            "host": os.environ.get("HELLO_HTTPS_HOST"),
            "port": os.environ.get("HELLO_HTTPS_PORT"),
            "key_path": os.environ.get("HELLO_HTTPS_KEY"),
            "cert_path": os.environ.get("HELLO_HTTPS_CERT"),
            "key_password": os.environ.get("HELLO_HTTPS_KEY_PASSWORD"),
        }
        return cls(**{k: v for k, v in env.items() if v is not None})


class HelloEndpoint:
    """ASGI endpoint answering every request with a fixed 200 reply.

    Routes to an ASGI app carry no method list, so any method on any path
    matches.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = PlainTextResponse(RESPONSE_BODY, status_code=200)
        await response(scope, receive, send)


# Initialize FastAPI app; no docs routes so every path gets the same reply
app = FastAPI(
    title="Hello HTTPS",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    routes=[Route("/{path:path}", HelloEndpoint(), include_in_schema=False)],
)


def create_ssl_context(
    cert_path: Path,
    key_path: Path,
    key_password: Optional[str] = None
) -> ssl.SSLContext:
    """
    Create a server SSL context from the key pair.

    serve() uses it to reject a bad pair before binding; uvicorn builds the
    context it actually serves with from the same files.

    Args:
        cert_path: Path to server certificate
        key_path: Path to server private key
        key_password: Password for an encrypted key

    Returns:
        Configured SSL context

    Raises:
        FileNotFoundError: If either file is missing
        ssl.SSLError: If either file is malformed or they do not match
    """
    logger.info(f"Loading TLS key pair: {cert_path}, {key_path}")

    context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
    context.load_cert_chain(certfile=str(cert_path), keyfile=str(key_path), password=key_password)
    context.minimum_version = ssl.TLSVersion.TLSv1_2

    logger.info("SSL context created successfully")
    return context


class HelloConfig(uvicorn.Config):
    """uvicorn configuration whose served SSL context refuses anything below TLS 1.2."""

    def load(self) -> None:
        super().load()
        if self.ssl is not None:
            self.ssl.minimum_version = ssl.TLSVersion.TLSv1_2


class HelloServer(uvicorn.Server):
    """uvicorn server that reports the listening URL once the port is bound."""

    async def startup(self, sockets=None) -> None:
        # uvicorn exits here if the bind fails, so nothing is logged then
        await super().startup(sockets=sockets)
        if self.started:
            logger.info(f"Server is running on https://localhost:{self.config.port}")


def build_uvicorn_config(settings: ListenerSettings) -> HelloConfig:
    """uvicorn configuration serving the app over HTTPS only."""
    return HelloConfig(
        app,
        host=settings.host,
        port=settings.port,
        ssl_keyfile=str(settings.key_path),
        ssl_certfile=str(settings.cert_path),
        ssl_keyfile_password=settings.key_password,
        log_level=settings.log_level,
    )


def serve(settings: ListenerSettings) -> None:
    """
    Start the HTTPS listener and block until it exits.

    The key pair is checked with create_ssl_context before the port is bound,
    so a missing or corrupt file aborts startup instead of serving plaintext.
    uvicorn then loads the same pair into its own context, held to the same
    TLS 1.2 minimum by HelloConfig.
    """
    try:
        create_ssl_context(settings.cert_path, settings.key_path, settings.key_password)
    except (OSError, ssl.SSLError) as e:
        logger.error(f"Failed to load TLS key pair: {e}")
        raise

    HelloServer(build_uvicorn_config(settings)).run()


def main(argv: Optional[list[str]] = None) -> None:
    """Command-line entry point."""
    defaults = ListenerSettings.from_env()

    parser = argparse.ArgumentParser(prog="hello-https", description="Serve 'Hello, World!' over HTTPS.")
    parser.add_argument("--host", default=defaults.host, help=f"Address to bind (default: {defaults.host})")
    parser.add_argument("--port", type=int, default=defaults.port, help=f"Port to bind (default: {defaults.port})")
    parser.add_argument("--key", default=str(defaults.key_path), help="Server private key (PEM)")
    parser.add_argument("--cert", default=str(defaults.cert_path), help="Server certificate (PEM)")
    args = parser.parse_args(argv)

    settings = ListenerSettings(**{
        **defaults.model_dump(),
        "host": args.host,
        "port": args.port,
        "key_path": Path(args.key),
        "cert_path": Path(args.cert),
    })

    serve(settings)


if __name__ == "__main__":
    main()
