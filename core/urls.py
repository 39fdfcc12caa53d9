from django.contrib import admin
from django.urls import include, path
from rest_framework.authtoken.views import obtain_auth_token

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/login/", obtain_auth_token, name="login"),
    path("api/", include("common.api.urls")),
    path("api/", include("drones.api.urls")),
    path("api/", include("orders.api.urls")),
    path("api/", include("payments.api.urls")),
]
