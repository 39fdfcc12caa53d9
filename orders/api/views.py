"""Orders API views.

List and create orders on the same endpoint: staff see every order (with
filters), customers only their own. Provide a per-user listing, the detail
route with object-level permission checks, a staff-only status update and a
cancel action. All state changes go through `orders.services`.
"""

from django.utils.dateparse import parse_date
from rest_framework import generics, status
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.exceptions import NotFound
from orders import services
from orders.models import Order
from orders.transitions import OrderStatus, PaymentStatus
from .permissions import IsAdminStaff, IsOrderOwnerOrStaff
from .serializers import (
    OrderCancelSerializer,
    OrderCreateSerializer,
    OrderOutputSerializer,
    OrderStatusPatchSerializer,
)


# ----------------------------- helpers (module-level) -----------------------------

def _orders_queryset():
    return Order.objects.select_related("drone", "user").prefetch_related("status_history")


def _parse_date_param(params, key):
    raw = params.get(key)
    if not raw:
        return None
    value = parse_date(raw)
    if value is None:
        raise ValidationError({key: "Use the YYYY-MM-DD format."})
    return value


def _apply_admin_filters(qs, params):
    """Filters of the staff order listing: status, payment, tracking number, customer email, date range."""
    status_value = params.get("status")
    if status_value:
        if status_value not in OrderStatus.values:
            raise ValidationError({"status": f"Unknown status '{status_value}'."})
        qs = qs.filter(status=status_value)

    payment_value = params.get("payment_status")
    if payment_value:
        if payment_value not in PaymentStatus.values:
            raise ValidationError({"payment_status": f"Unknown payment status '{payment_value}'."})
        qs = qs.filter(payment_status=payment_value)

    tracking = params.get("tracking_number")
    if tracking:
        qs = qs.filter(tracking_number__iexact=tracking.strip())

    email = params.get("customer_email")
    if email:
        qs = qs.filter(customer_info__email__iexact=email.strip().lower())

    start = _parse_date_param(params, "start_date")
    if start:
        qs = qs.filter(order_date__date__gte=start)
    end = _parse_date_param(params, "end_date")
    if end:
        qs = qs.filter(order_date__date__lte=end)
    return qs


def _validate_patch_fields(data: dict):
    """Allow only 'status' and 'notes' in the status PATCH; return a 400 Response otherwise."""
    allowed = {"status", "notes"}
    extra = set(data.keys()) - allowed
    if extra:
        return Response(
            {"detail": f"Only 'status' and 'notes' may be sent. Invalid fields: {', '.join(sorted(extra))}."},
            status=status.HTTP_400_BAD_REQUEST,
        )
    return None


def _order_or_404(pk) -> Order:
    order = _orders_queryset().filter(pk=pk).first()
    if order is None:
        raise NotFound("Order not found")
    return order


def _fresh(order: Order) -> Order:
    """Reload with related rows so the representation shows the new history entry."""
    return _orders_queryset().get(pk=order.pk)


class OrdersPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100


# --------------------------------------- views ---------------------------------------

class OrderListCreateAPIView(generics.ListCreateAPIView):
    """GET: staff list all orders (filterable), customers list their own.
    POST: place an order for a drone.
    """

    permission_classes = [IsAuthenticated]
    pagination_class = OrdersPagination

    def get_serializer_class(self):
        """Use output serializer for GET and input serializer for POST."""
        return OrderOutputSerializer if self.request.method == "GET" else OrderCreateSerializer

    def get_queryset(self):
        user = self.request.user
        qs = _orders_queryset()
        if user.is_staff:
            return _apply_admin_filters(qs, self.request.query_params)
        return qs.filter(user=user)

    def create(self, request, *args, **kwargs):
        """Validate and create a new order, returning the full order payload."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = serializer.save()
        out = OrderOutputSerializer(_fresh(order), context={"request": request})
        return Response(out.data, status=status.HTTP_201_CREATED)


class UserOrderListAPIView(generics.ListAPIView):
    """GET /api/orders/user/{user_id}/: a user's orders, for that user or staff."""

    permission_classes = [IsAuthenticated]
    serializer_class = OrderOutputSerializer
    pagination_class = OrdersPagination

    def get_queryset(self):
        user = self.request.user
        user_id = self.kwargs["user_id"]
        if not user.is_staff and user.id != user_id:
            raise PermissionDenied("You can only view your own orders.")
        return _orders_queryset().filter(user_id=user_id)


class OrderDetailAPIView(generics.RetrieveAPIView):
    """GET a single order; only its customer or staff."""

    permission_classes = [IsAuthenticated, IsOrderOwnerOrStaff]
    serializer_class = OrderOutputSerializer

    def get_queryset(self):
        return _orders_queryset()


class OrderStatusUpdateAPIView(APIView):
    """PATCH /api/orders/{id}/status/: staff move an order to another status."""

    permission_classes = [IsAuthenticated, IsAdminStaff]

    def patch(self, request, pk: int):
        err = _validate_patch_fields(request.data)
        if err:
            return err
        serializer = OrderStatusPatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.transition_status(
            pk,
            serializer.validated_data["status"],
            actor=request.user,
            notes=serializer.validated_data.get("notes", ""),
        )
        return Response(OrderOutputSerializer(_fresh(order)).data, status=status.HTTP_200_OK)


class OrderCancelAPIView(APIView):
    """POST /api/orders/{id}/cancel/: the customer cancels an early, unpaid order;
    staff may cancel any order that is not shipped yet.
    """

    permission_classes = [IsAuthenticated, IsOrderOwnerOrStaff]

    def post(self, request, pk: int):
        order = _order_or_404(pk)
        self.check_object_permissions(request, order)
        serializer = OrderCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.cancel_order(
            order.pk,
            actor=request.user,
            notes=serializer.validated_data.get("notes", ""),
            force=request.user.is_staff,
        )
        return Response(OrderOutputSerializer(_fresh(order)).data, status=status.HTTP_200_OK)
