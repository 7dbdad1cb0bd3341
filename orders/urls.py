"""URL routes for the orders app (v1)."""

from django.urls import path

from .views import (
    AdminOrderListView,
    AdminOrderStatusView,
    AdminOrderTrackingView,
    OrderCancelView,
    OrderDetailView,
    OrderListCreateView,
    OrderTrackView,
)

app_name = "orders"

urlpatterns = [
    path("", OrderListCreateView.as_view(), name="order-list"),
    path("<int:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path("<int:order_id>/track/", OrderTrackView.as_view(), name="order-track"),
    path("<int:order_id>/cancel/", OrderCancelView.as_view(), name="order-cancel"),
    path("admin/all/", AdminOrderListView.as_view(), name="admin-order-list"),
    path("admin/<int:order_id>/status/", AdminOrderStatusView.as_view(), name="admin-order-status"),
    path("admin/<int:order_id>/tracking/", AdminOrderTrackingView.as_view(), name="admin-order-tracking"),
]
