from .layout_report import LayoutReport

__all__ = ['LayoutReport']
