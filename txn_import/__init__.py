"""CSV transaction import tool.

Parses personal-finance transaction exports, uploads the accepted rows to a
bulk-insert service and reconciles the assigned ids into a local JSON store.
"""

__version__ = "0.1.0"
