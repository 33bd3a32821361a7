from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from reposync.database.tables.base_class import BasePublic


class Hosts(BasePublic):
    name: Mapped[str] = mapped_column(unique=True)
    url: Mapped[str] = mapped_column()
    kind: Mapped[str] = mapped_column(String(32))
