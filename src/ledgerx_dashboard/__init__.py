from .app.bootstrap import DashboardApp

__all__ = ["DashboardApp"]
