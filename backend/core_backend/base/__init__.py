"""
Core backend base components.

Foundational viewset and filter classes shared by the API apps.
"""

from .viewsets import ReadOnlyBaseViewSet
from .filters import BaseFilterSet, FlexibleDateTimeFilter

__all__ = [
    # ViewSets
    'ReadOnlyBaseViewSet',

    # Filters
    'BaseFilterSet',
    'FlexibleDateTimeFilter',
]
