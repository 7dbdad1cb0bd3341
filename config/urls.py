"""Root URL configuration.

Every API route is versioned under `/api/v1/`; admin write surfaces live
under `/api/v1/admin/` or an `admin/` sub-path of their domain.
"""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from .health import health

admin.site.site_header = "Storefront Admin"
admin.site.index_title = "Admin"

urlpatterns = [
    path("admin/", admin.site.urls),
    # API schema and Swagger UI
    path("api/schema/", SpectacularAPIView.as_view(), name="api-schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="api-schema"), name="api-docs"),
    # Healthcheck
    path("health/", health, name="health"),
    # Versioned v1 routes only
    path("api/v1/catalog/", include("catalog.urls")),
    path("api/v1/admin/catalog/", include("catalog.admin_urls")),
    path("api/v1/cart/", include("cart.urls")),
    path("api/v1/coupons/", include("coupons.urls")),
    path("api/v1/admin/coupons/", include("coupons.admin_urls")),
    path("api/v1/wishlist/", include("wishlist.urls")),
    path("api/v1/reviews/", include("reviews.urls")),
    path("api/v1/orders/", include("orders.urls")),
    path("api/v1/payments/", include("payments.urls")),
    path("api/v1/inventory/", include("inventory.urls")),
    path("api/v1/analytics/", include("analytics.urls")),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
