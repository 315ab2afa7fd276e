from rest_framework import permissions


class CanPlaceOrReadOrders(permissions.BasePermission):
    """
    Anyone may place an order (guest checkout); everything else needs an
    authenticated user. Row-level visibility is handled by the queryset.
    """

    def has_permission(self, request, view):
        if view.action == "create":
            return True
        return bool(request.user and request.user.is_authenticated)
