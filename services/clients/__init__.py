"""Подмодуль сервисов, связанных с клиентами."""

from .client_service import (
    ClientNotFoundError,
    ClientService,
    NoValidFields,
    ProtectedFieldError,
)
from .dto import ClientDetailsDTO, ClientSummaryDTO

__all__ = [
    "ClientService",
    "ClientNotFoundError",
    "NoValidFields",
    "ProtectedFieldError",
    "ClientSummaryDTO",
    "ClientDetailsDTO",
]
