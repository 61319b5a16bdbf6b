"""Existence checks for migrations.

Every ``upgrade()`` must survive being run against a database that already
has some or all of its objects, so DDL goes through these helpers. They ask
SQLAlchemy's inspector about the live schema instead of parsing the error
text SQLite produces for duplicates.

Call them only while a migration is running (the ``op`` proxy is bound).
"""
import logging

import sqlalchemy as sa
from alembic import op


logger = logging.getLogger(__name__)


def _inspector():
    # A fresh inspector each time; Inspector caches reflection results.
    return sa.inspect(op.get_bind())


def has_table(table_name: str) -> bool:
    return _inspector().has_table(table_name)


def column_names(table_name: str) -> list:
    inspector = _inspector()
    if not inspector.has_table(table_name):
        return []
    return [column["name"] for column in inspector.get_columns(table_name)]


def index_names(table_name: str) -> list:
    inspector = _inspector()
    if not inspector.has_table(table_name):
        return []
    return [index["name"] for index in inspector.get_indexes(table_name)]


def create_table_if_missing(table_name: str, *columns, **kw) -> bool:
    if has_table(table_name):
        logger.debug("Table %s already exists, skipping", table_name)
        return False
    op.create_table(table_name, *columns, **kw)
    return True


def add_column_if_missing(table_name: str, column: sa.Column) -> bool:
    if column.name in column_names(table_name):
        logger.debug("Column %s.%s already exists, skipping", table_name, column.name)
        return False
    op.add_column(table_name, column)
    logger.info("Added column %s.%s", table_name, column.name)
    return True


def create_index_if_missing(index_name: str, table_name: str, columns, unique: bool = False) -> bool:
    if index_name in index_names(table_name):
        return False
    op.create_index(index_name, table_name, columns, unique=unique)
    return True


def drop_index_if_exists(index_name: str, table_name: str) -> None:
    if index_name in index_names(table_name):
        op.drop_index(index_name, table_name=table_name)


def drop_table_if_exists(table_name: str) -> None:
    if has_table(table_name):
        op.drop_table(table_name)
