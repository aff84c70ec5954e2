"""xpctl - browse XPipe connections and open terminal sessions."""

__version__ = "0.1.0"
