"""Furnas reservoir monitoring tables.

These mirror the externally managed schema; the application only reads
them. Column names follow the database exactly because they double as the
public API field names.
"""

from datetime import date, time
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Integer, Numeric, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column

from limnohub.db.base import Base


class Reservatorio(Base):
    """Reservoir."""

    __tablename__ = "tbreservatorio"

    idreservatorio: Mapped[int] = mapped_column(Integer, primary_key=True)
    nome: Mapped[str] = mapped_column(String(255), nullable=False)


class Campanha(Base):
    """Sampling campaign on a reservoir."""

    __tablename__ = "tbcampanha"

    idcampanha: Mapped[int] = mapped_column(Integer, primary_key=True)
    nrocampanha: Mapped[int | None] = mapped_column(Integer, nullable=True)
    datainicio: Mapped[date | None] = mapped_column(Date, nullable=True)
    datafim: Mapped[date | None] = mapped_column(Date, nullable=True)
    idreservatorio: Mapped[int | None] = mapped_column(
        ForeignKey("tbreservatorio.idreservatorio"), nullable=True
    )


class Sitio(Base):
    """Sampling site."""

    __tablename__ = "tbsitio"

    idsitio: Mapped[int] = mapped_column(Integer, primary_key=True)
    nome: Mapped[str] = mapped_column(String(255), nullable=False)
    descricao: Mapped[str | None] = mapped_column(Text, nullable=True)
    lat: Mapped[Decimal | None] = mapped_column(Numeric(10, 6), nullable=True)
    lng: Mapped[Decimal | None] = mapped_column(Numeric(10, 6), nullable=True)


class AbioticoColuna(Base):
    """Abiotic water-column measurement taken at a site during a campaign."""

    __tablename__ = "tbabioticocoluna"

    idabioticocoluna: Mapped[int] = mapped_column(Integer, primary_key=True)
    idcampanha: Mapped[int | None] = mapped_column(
        ForeignKey("tbcampanha.idcampanha"), nullable=True, index=True
    )
    idsitio: Mapped[int | None] = mapped_column(
        ForeignKey("tbsitio.idsitio"), nullable=True, index=True
    )
    datamedida: Mapped[date | None] = mapped_column(Date, nullable=True)
    horamedida: Mapped[time | None] = mapped_column(Time, nullable=True)

    # Stored as text upstream; some loaders wrote pt-BR decimals ("5,2")
    profundidade: Mapped[str | None] = mapped_column(String(50), nullable=True)
    dic: Mapped[str | None] = mapped_column(String(50), nullable=True)
    nt: Mapped[str | None] = mapped_column(String(50), nullable=True)
    pt: Mapped[str | None] = mapped_column(String(50), nullable=True)
    delta13c: Mapped[str | None] = mapped_column(String(50), nullable=True)
    delta15n: Mapped[str | None] = mapped_column(String(50), nullable=True)
