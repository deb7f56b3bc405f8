"""
V1 API client.

Authenticates with an auth token and talks to the "crm/private" endpoints,
one module and one API method per request.
"""

from .client import Client
from .query import Query
from .entities import Record

__all__ = ["Client", "Query", "Record"]
