from cliphistory.utils.display import render_menu, truncate

__all__ = ['render_menu', 'truncate']
