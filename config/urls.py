from django.urls import include, path

from . import views

urlpatterns = [
    path("health/", views.health_check, name="health_check"),
    path("member-dashboard/", include("walletpass.member_dashboard.urls", namespace="member_dashboard")),
]
