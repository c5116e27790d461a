from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase


class Base(AsyncAttrs, DeclarativeBase):
    """Declarative base for the war room models.

    AsyncAttrs allows awaiting lazy attributes (``await obj.awaitable_attrs.x``)
    under the async session.
    """
    pass
