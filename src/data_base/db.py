# src/data_base/db.py
# This module sets up the asynchronous database engine used by the bulk loader.


###### IMPORT TOOLS ######
# global imports
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import DeclarativeBase

# local imports
from src.config import get_settings, to_asyncpg_url


###### CREATE ASYNC ENGINE ######
def make_engine(url: str | None = None) -> AsyncEngine:
    '''Create an asyncpg-backed engine; defaults to the configured database.'''
    database_url = to_asyncpg_url(url) if url else get_settings().database_url
    return create_async_engine(database_url, pool_pre_ping=True, pool_size=2, max_overflow=0)


###### BASE CLASS FOR MODELS ######
class Base(DeclarativeBase):
    __abstract__ = True
