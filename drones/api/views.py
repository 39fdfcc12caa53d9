"""Drones API views.

Public catalogue listing with pagination, filtering and ordering; staff-only
creation, patching and deletion on the detail route, plus a staff-only
restock endpoint that goes through the stock ledger.
"""

from decimal import Decimal, InvalidOperation

from django.db.models import ProtectedError, Q
from rest_framework import generics, status
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from drones import stock
from drones.models import Drone
from .serializers import (
    DroneCreateSerializer,
    DronePatchSerializer,
    DroneSerializer,
    RestockSerializer,
)


# ----------------------------- helpers (module-level) -----------------------------

ORDERING_MAP = {
    "price": ("price", "id"),
    "-price": ("-price", "id"),
    "name": ("name",),
    "-name": ("-name",),
    "newest": ("-created_at", "-id"),
}


def _visible_drones(qs, user):
    """Staff see the whole catalogue; everybody else only listings in stock."""
    if user and user.is_authenticated and user.is_staff:
        return qs
    return qs.filter(in_stock=True)


def _parse_price(params, key):
    raw = params.get(key)
    if raw is None:
        return None
    try:
        return Decimal(raw)
    except (InvalidOperation, TypeError):
        raise ValidationError({key: "Must be a number."})


def _validate_patch_fields(data: dict):
    """Reject stock_quantity in PATCH; stock only moves through orders and restock."""
    if "stock_quantity" in data:
        return Response(
            {"detail": "stock_quantity cannot be patched. Use the restock endpoint."},
            status=status.HTTP_400_BAD_REQUEST,
        )
    return None


# --------------------------------------- views ---------------------------------------

class DronesPagination(PageNumberPagination):
    """Default pagination for the catalogue with an adjustable page size."""

    page_size = 12
    page_size_query_param = "page_size"
    max_page_size = 100


class DroneListCreateAPIView(generics.ListCreateAPIView):
    """GET: public paginated catalogue with filters; POST: create drone (staff-only)."""

    queryset = Drone.objects.all()
    pagination_class = DronesPagination

    def get_permissions(self):
        """Only staff may create drones; the catalogue is public."""
        if self.request.method == "POST":
            return [IsAdminUser()]
        return [AllowAny()]

    def get_serializer_class(self):
        return DroneSerializer if self.request.method == "GET" else DroneCreateSerializer

    def get_queryset(self):
        qs = _visible_drones(super().get_queryset(), self.request.user)
        qs = self._apply_filters(qs, self.request.query_params)
        return self._apply_ordering(qs, self.request.query_params.get("ordering"))

    # --- helpers ---
    def _apply_filters(self, qs, params):
        category = params.get("category")
        if category:
            if category not in Drone.Category.values:
                raise ValidationError({"category": f"Must be one of: {', '.join(Drone.Category.values)}."})
            qs = qs.filter(category=category)

        min_price = _parse_price(params, "min_price")
        if min_price is not None:
            qs = qs.filter(price__gte=min_price)

        max_price = _parse_price(params, "max_price")
        if max_price is not None:
            qs = qs.filter(price__lte=max_price)

        search = params.get("search")
        if search:
            qs = qs.filter(
                Q(name__icontains=search) | Q(model__icontains=search) | Q(description__icontains=search)
            )
        return qs

    def _apply_ordering(self, qs, ordering):
        if not ordering:
            return qs
        if ordering not in ORDERING_MAP:
            raise ValidationError({"ordering": f"Allowed values: {', '.join(ORDERING_MAP)}."})
        return qs.order_by(*ORDERING_MAP[ordering])

    def create(self, request, *args, **kwargs):
        """Create the drone and return the full representation."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        drone = serializer.save()
        return Response(DroneSerializer(drone).data, status=status.HTTP_201_CREATED)


class DroneRetrieveUpdateDestroyAPIView(generics.RetrieveUpdateDestroyAPIView):
    """GET: public detail. PATCH/DELETE: staff-only."""

    queryset = Drone.objects.all()

    def get_permissions(self):
        if self.request.method in ["PATCH", "PUT", "DELETE"]:
            return [IsAdminUser()]
        return [AllowAny()]

    def get_queryset(self):
        return _visible_drones(super().get_queryset(), self.request.user)

    def get_serializer_class(self):
        if self.request.method in ["PATCH", "PUT"]:
            return DronePatchSerializer
        return DroneSerializer

    def update(self, request, *args, **kwargs):
        """Partial update only; respond with the full drone."""
        bad = _validate_patch_fields(request.data)
        if bad is not None:
            return bad
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return Response(DroneSerializer(instance).data, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        """Delete a drone unless orders still reference it (409)."""
        instance = self.get_object()
        try:
            self.perform_destroy(instance)
        except ProtectedError:
            return Response(
                {"detail": "Drone is referenced by orders and cannot be deleted."},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)


class DroneRestockAPIView(APIView):
    """POST /api/drones/{id}/restock/ -> add units to stock (staff-only)."""

    permission_classes = [IsAdminUser]

    def post(self, request, pk: int):
        serializer = RestockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        drone = stock.restock(pk, serializer.validated_data["quantity"])
        return Response(DroneSerializer(drone).data, status=status.HTTP_200_OK)
