"""Hello HTTPS - fixed-response listener served over TLS."""

from .main import app, ListenerSettings, create_ssl_context, serve

__all__ = ['app', 'ListenerSettings', 'create_ssl_context', 'serve']
