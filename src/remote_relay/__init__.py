"""remote-relay

Relays a raw TCP byte stream from a source endpoint to a destination endpoint,
reconnecting either side whenever its connection fails:
- the Connector absorbs transient network failures by retrying forever
- misconfiguration (unresolvable hosts, broken socket options) fails fast
- the Forwarder is best-effort: bytes in flight during a destination failure are dropped
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
