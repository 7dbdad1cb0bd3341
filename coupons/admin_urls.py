"""Admin router for coupon CRUD."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import CouponAdminViewSet

router = SimpleRouter()
router.register(r"", CouponAdminViewSet, basename="admin-coupon")

urlpatterns = [path("", include(router.urls))]
