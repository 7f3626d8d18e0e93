"""
Studio Kernel

Shared core of the studio contract system:
- Contract document and milestone ("termin") domain types
- Typed exceptions and structured logging
- SQLAlchemy record store with activity logging
"""

__version__ = "0.1.0"
