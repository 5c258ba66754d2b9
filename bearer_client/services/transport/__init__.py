from .authenticating import AuthenticatingTransport
from .refresh import RefreshTransport

__all__ = ["AuthenticatingTransport", "RefreshTransport"]
