from .layout_service import LayoutService

__all__ = ['LayoutService']
