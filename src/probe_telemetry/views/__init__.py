"""Consuming views that own a refresh scheduler and expose derived values."""

from .client_details import ClientDetailsView
from .dashboard import DashboardSummary, DashboardView

__all__ = ["ClientDetailsView", "DashboardSummary", "DashboardView"]
