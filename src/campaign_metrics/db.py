"""MongoDB client helpers.

Centralizes creation of Mongo clients so the store adapter and the CLI
share one connection policy.
"""

from __future__ import annotations

from typing import Any
from pymongo import MongoClient
from pymongo.database import Database

import certifi


def get_client(uri: str) -> MongoClient:
    """Return a configured PyMongo MongoClient for the provided URI.

    TLS with the certifi CA bundle is enabled for `mongodb+srv` URIs
    (hosted clusters); local `mongodb://` URIs connect in plain text.

    Args:
        uri: MongoDB connection URI.

    Returns:
        Configured MongoClient instance.
    """
    tls_kwargs: dict[str, Any] = {}
    if uri.startswith("mongodb+srv://"):
        tls_kwargs = {"tls": True, "tlsCAFile": certifi.where()}

    return MongoClient(
        uri,
        serverSelectionTimeoutMS=30000,
        socketTimeoutMS=30000,
        connectTimeoutMS=30000,
        **tls_kwargs,
    )


def get_db(
    client: MongoClient[dict[str, Any]],
    db_name: str,
) -> Database[dict[str, Any]]:
    """Return the database holding the contact and `datasets` collections.

    Args:
        client: Client from `get_client`.
        db_name: Usually `Settings.mongo_db`.
    """
    return client[db_name]
