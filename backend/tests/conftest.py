from __future__ import annotations

from collections.abc import Iterator
from datetime import date, time, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from limnohub.db.base import Base
from limnohub.db.session import get_session_factory
from limnohub.main import app
from limnohub.models import AbioticoColuna, Campanha, Reservatorio, Sitio

CAMPAIGN_5_ROWS = 23
FIRST_DAY = date(2023, 1, 1)


def _seed(session: Session) -> None:
    session.add(Reservatorio(idreservatorio=1, nome="Furnas"))
    session.add_all(
        [
            Campanha(
                idcampanha=5,
                nrocampanha=12,
                datainicio=date(2023, 1, 1),
                datafim=date(2023, 1, 31),
                idreservatorio=1,
            ),
            Campanha(idcampanha=6, nrocampanha=13, datainicio=date(2023, 6, 1)),
        ]
    )
    session.add_all(
        [
            Sitio(idsitio=1, nome="Ponto A", descricao="Barragem", lat=-20.67, lng=-46.31),
            Sitio(idsitio=2, nome="Ponto B; margem", descricao=None, lat=None, lng=None),
        ]
    )
    session.flush()

    # ids 1..23: campaign 5, one per day starting 2023-01-01
    for i in range(CAMPAIGN_5_ROWS):
        session.add(
            AbioticoColuna(
                idabioticocoluna=i + 1,
                idcampanha=5,
                idsitio=1,
                datamedida=FIRST_DAY + timedelta(days=i),
                horamedida=time(8, 30),
                profundidade="1.234,56",
                dic="12.5",
                nt=None,
                pt="abc",
                delta13c="-28,4",
                delta15n="7",
            )
        )
    # ids 101..104: campaign 6 (no reservoir), site 2
    for i in range(4):
        session.add(
            AbioticoColuna(
                idabioticocoluna=101 + i,
                idcampanha=6,
                idsitio=2,
                datamedida=date(2023, 6, 1 + i),
                horamedida=time(14, 0),
                profundidade="3,0",
            )
        )
    # id 201: no campaign, no site
    session.add(
        AbioticoColuna(
            idabioticocoluna=201,
            datamedida=date(2022, 12, 31),
            horamedida=None,
            profundidade="0.5",
        )
    )


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    path = tmp_path / "furnas.db"
    engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        _seed(session)
        session.commit()
    engine.dispose()
    return path


@pytest.fixture
def session_factory(database_path: Path) -> async_sessionmaker[AsyncSession]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{database_path}", poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def client(session_factory: async_sessionmaker[AsyncSession]) -> Iterator[TestClient]:
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
