"""Taxonomía de errores del Core.

Por qué tipos separados:
- El orquestador decide qué aborta la ejecución y qué se degrada a warning.
- Los adaptadores traducen errores de librerías (httpx, pyVmomi, socket) a
  estos tipos para que el Core no conozca detalles de transporte.
"""

from __future__ import annotations


class CorrelationError(Exception):
    """Base class for every error raised by the correlation engine."""


class CredentialError(CorrelationError):
    """Credential input is missing, unreadable or malformed."""


class ResolutionError(CorrelationError):
    """An endpoint name could not be resolved to an IP address."""


class DataIntegrityFault(CorrelationError):
    """A provider subnet record lacks the fields needed to build a CIDR."""


class InvalidAddressError(CorrelationError):
    """The IPv6 prefix template or VLAN number cannot form a valid network."""


class UpstreamQueryError(CorrelationError):
    """A collaborator call (vSphere, SoftLayer) failed."""
