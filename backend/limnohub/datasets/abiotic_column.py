"""Abiotic water-column measurements (``tbabioticocoluna``)."""

from limnohub.datasets.base import Dataset

ABIOTIC_COLUMN = Dataset(
    entity="abiotico_coluna",
    select_sql="""
        SELECT
            a.idabioticocoluna, a.datamedida, a.horamedida, a.profundidade,
            a.dic, a.nt, a.pt, a.delta13c, a.delta15n,
            b.idcampanha, b.nrocampanha,
            c.idsitio, c.nome AS sitio_nome, c.lat AS sitio_lat, c.lng AS sitio_lng
        FROM tbabioticocoluna AS a
        LEFT JOIN tbcampanha AS b ON a.idcampanha = b.idcampanha
        LEFT JOIN tbsitio AS c ON a.idsitio = c.idsitio
    """,
    count_sql="""
        SELECT COUNT(a.idabioticocoluna)
        FROM tbabioticocoluna AS a
        LEFT JOIN tbcampanha AS b ON a.idcampanha = b.idcampanha
        LEFT JOIN tbsitio AS c ON a.idsitio = c.idsitio
    """,
    order_by="a.datamedida DESC, a.horamedida DESC",
    detail_sql="""
        SELECT
            a.idabioticocoluna, a.datamedida, a.horamedida, a.profundidade,
            a.dic, a.nt, a.pt, a.delta13c, a.delta15n,
            b.idcampanha,
            b.nrocampanha,
            b.datainicio AS campanha_datainicio,
            b.datafim AS campanha_datafim,
            b.idreservatorio,
            c.idsitio,
            c.nome AS sitio_nome,
            c.descricao AS sitio_descricao,
            c.lat AS sitio_lat,
            c.lng AS sitio_lng,
            d.nome AS reservatorio_nome
        FROM tbabioticocoluna AS a
        LEFT JOIN tbcampanha AS b ON a.idcampanha = b.idcampanha
        LEFT JOIN tbsitio AS c ON a.idsitio = c.idsitio
        LEFT JOIN tbreservatorio AS d ON b.idreservatorio = d.idreservatorio
        WHERE a.idabioticocoluna = :id
    """,
    column_map={
        "idcampanha": "a.idcampanha",
        "idsitio": "a.idsitio",
    },
    filter_types={
        "idcampanha": int,
        "idsitio": int,
    },
)
