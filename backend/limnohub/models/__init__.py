"""SQLAlchemy models."""

from limnohub.models.furnas import AbioticoColuna, Campanha, Reservatorio, Sitio

__all__ = ["AbioticoColuna", "Campanha", "Reservatorio", "Sitio"]
