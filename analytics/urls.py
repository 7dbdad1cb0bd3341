from django.urls import path

from .views import CustomerAnalyticsView, DashboardView, ProductAnalyticsView, SalesView

app_name = "analytics"

urlpatterns = [
    path("dashboard/", DashboardView.as_view(), name="dashboard"),
    path("sales/", SalesView.as_view(), name="sales"),
    path("products/", ProductAnalyticsView.as_view(), name="products"),
    path("customers/", CustomerAnalyticsView.as_view(), name="customers"),
]
