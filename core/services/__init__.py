# core/services/__init__.py
from .availability import AvailabilityCalculator
from .base import Service
from .borrowers import BorrowerService
from .catalog import BookService
from .circulation import CirculationService
from .reporting import Page, ReportingService, export_filename, last_month_range

__all__ = [
    'AvailabilityCalculator',
    'BookService',
    'BorrowerService',
    'CirculationService',
    'Page',
    'ReportingService',
    'Service',
    'export_filename',
    'last_month_range',
]
