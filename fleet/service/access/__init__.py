"""
Access
------

Functions for reading and writing the resources in the store. Every
function that may run as part of a larger transition accepts a
``using_db`` connection, and the getters can lock the row they read.
"""

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.queryset import QuerySet


def scoped(query: QuerySet, using_db: BaseDBAsyncClient = None, lock=False) -> QuerySet:
    """
    Binds a query to the given connection, optionally locking the rows it reads.

    Locks are held until the transaction the connection belongs to ends.
    Backends without row locks (SQLite) ignore the lock, and serialize
    transactions instead.
    """
    if lock:
        query = query.select_for_update()
    if using_db is not None:
        query = query.using_db(using_db)
    return query
