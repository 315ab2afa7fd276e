from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend
from ..pagination import StandardPagination


class ReadOnlyBaseViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Base ViewSet for read-only endpoints.

    Features:
    - Standard pagination, filtering and ordering
    - Querysets rebuilt per request; subclasses narrow them to what the
      requesting user may see
    """

    pagination_class = StandardPagination
    filter_backends = [
        DjangoFilterBackend,
        filters.OrderingFilter,
    ]
    ordering = ['-created_at']

    def get_queryset(self):
        """Re-evaluate the class-level queryset at request time."""
        if getattr(self, 'queryset', None) is not None:
            return self.queryset.model.objects.all()
        return super().get_queryset()
