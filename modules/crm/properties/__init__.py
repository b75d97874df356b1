"""
Объекты недвижимости: статус, выводимый из сделок
"""

from modules.crm.properties.models import Property, PropertyStatus
from modules.crm.properties.property_repository import PropertyRepository
from modules.crm.properties.status_projector import PropertyStatusProjector, derive_property_status

__all__ = [
    'Property',
    'PropertyStatus',
    'PropertyRepository',
    'PropertyStatusProjector',
    'derive_property_status',
]
