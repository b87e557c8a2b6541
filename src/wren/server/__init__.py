"""Request pipeline: dispatch, handler invocation, negotiation, sending."""
