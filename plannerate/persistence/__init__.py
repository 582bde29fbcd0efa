from .repository import LayoutRepository, InMemoryLayoutRepository
from .fixture_loader import FixtureLoader
from .fixture_validator import FixtureValidator

__all__ = ['LayoutRepository', 'InMemoryLayoutRepository', 'FixtureLoader', 'FixtureValidator']
