"""Application configuration"""
from .settings import CompositionSettings, InstrumentType, default_instruments

__all__ = [
    'CompositionSettings', 'InstrumentType', 'default_instruments'
]
