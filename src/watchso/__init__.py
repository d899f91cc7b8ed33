"""watchso - hot reload Solana programs.

Watches a native, Anchor or Seahorse project and rebuilds, redeploys and
re-syncs program ids as files change.
"""

__version__ = "0.1.0"
