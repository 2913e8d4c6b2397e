"""Request pipeline: handler invocation, response negotiation, error mapping, WSGI."""
