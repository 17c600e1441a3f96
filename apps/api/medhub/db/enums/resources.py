"""Lifecycle resource kinds."""

from enum import Enum


class ResourceKind(str, Enum):
    """Resource kinds with their own transition table."""

    EQUIPMENT = "equipment"
    SERVICE_REQUEST = "service_request"
    QUOTE = "quote"
    DISPUTE = "dispute"
    SUPPORT_TICKET = "support_ticket"
    PAYMENT = "payment"
    PROVIDER = "provider"
