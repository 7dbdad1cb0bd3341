from common.serializers import DateRangeQuerySerializer
from rest_framework import serializers

from .services import GROUPINGS, PERIODS, PRODUCT_SORTS


class DashboardQuerySerializer(serializers.Serializer):
    period = serializers.ChoiceField(choices=PERIODS, default="today")


class SalesQuerySerializer(DateRangeQuerySerializer):
    group_by = serializers.ChoiceField(choices=list(GROUPINGS), default="day")


class ProductsQuerySerializer(serializers.Serializer):
    sort_by = serializers.ChoiceField(choices=list(PRODUCT_SORTS), default="revenue")
    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)


class TopProductSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(allow_null=True)
    name = serializers.CharField()
    sales_count = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)


class ProductPerformanceSerializer(TopProductSerializer):
    average_rating = serializers.DecimalField(max_digits=3, decimal_places=2)
    review_count = serializers.IntegerField()


class DateRangeSerializer(serializers.Serializer):
    start = serializers.DateTimeField(allow_null=True)
    end = serializers.DateTimeField()


class DashboardMetricsSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_customers = serializers.IntegerField()
    average_order_value = serializers.DecimalField(max_digits=14, decimal_places=2)


class DashboardSerializer(serializers.Serializer):
    period = serializers.CharField()
    date_range = DateRangeSerializer()
    metrics = DashboardMetricsSerializer()
    top_products = TopProductSerializer(many=True)


class SalesPointSerializer(serializers.Serializer):
    period = serializers.CharField()
    total_orders = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    average_order_value = serializers.DecimalField(max_digits=14, decimal_places=2)


class CustomerStatsSerializer(serializers.Serializer):
    new_customers = serializers.IntegerField()
    total_customers = serializers.IntegerField()
    repeat_customers = serializers.IntegerField()
    average_lifetime_value = serializers.DecimalField(max_digits=14, decimal_places=2)
