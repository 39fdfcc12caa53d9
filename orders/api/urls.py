from django.urls import path
from .views import (
    OrderCancelAPIView,
    OrderDetailAPIView,
    OrderListCreateAPIView,
    OrderStatusUpdateAPIView,
    UserOrderListAPIView,
)

urlpatterns = [
    path("orders/", OrderListCreateAPIView.as_view(), name="order-list"),
    path("orders/user/<int:user_id>/", UserOrderListAPIView.as_view(), name="order-user-list"),
    path("orders/<int:pk>/", OrderDetailAPIView.as_view(), name="order-detail"),
    path("orders/<int:pk>/status/", OrderStatusUpdateAPIView.as_view(), name="order-status"),
    path("orders/<int:pk>/cancel/", OrderCancelAPIView.as_view(), name="order-cancel"),
]
