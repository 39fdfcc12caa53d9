from django.urls import path
from .views import DroneListCreateAPIView, DroneRetrieveUpdateDestroyAPIView, DroneRestockAPIView

urlpatterns = [
    path("drones/", DroneListCreateAPIView.as_view(), name="drone-list"),
    path("drones/<int:pk>/", DroneRetrieveUpdateDestroyAPIView.as_view(), name="drone-detail"),
    path("drones/<int:pk>/restock/", DroneRestockAPIView.as_view(), name="drone-restock"),
]
