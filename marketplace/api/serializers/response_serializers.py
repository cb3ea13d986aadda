"""
Response Serializers for the Marketplace API

Render the plain records returned by the domain services (OrderRecord,
BoutiqueRecord, SellerStatistics...). They also drive the OpenAPI schema.
"""

from rest_framework import serializers

# ===== Common Response Serializers =====


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response"""

    error = serializers.CharField(help_text="Error code identifier")
    message = serializers.CharField(help_text="Human-readable error message")
    context = serializers.DictField(help_text="Actionable details (e.g. the line lacking stock)", required=False)


# ===== Order Response Serializers =====


class OrderLineSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    product_name = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, help_text="Price captured at order time")
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2)


class OrderSerializer(serializers.Serializer):
    id = serializers.CharField()
    status = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    item_count = serializers.IntegerField()
    lines = OrderLineSerializer(many=True)
    created_at = serializers.DateTimeField()
    validated_at = serializers.DateTimeField(allow_null=True)
    shipped_at = serializers.DateTimeField(allow_null=True)
    delivered_at = serializers.DateTimeField(allow_null=True)
    cancelled_at = serializers.DateTimeField(allow_null=True)
    cancellation_reason = serializers.CharField(allow_blank=True)


class OrderListResponseSerializer(serializers.Serializer):
    """Paginated order list response"""

    count = serializers.IntegerField(help_text="Total number of orders")
    page = serializers.IntegerField(help_text="Current page number")
    page_size = serializers.IntegerField(help_text="Items per page")
    has_next = serializers.BooleanField(help_text="Whether there is a next page")
    results = OrderSerializer(many=True)


# ===== Cart Response Serializers =====


class CartItemResponseSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    product_name = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    available_stock = serializers.IntegerField()
    unavailable = serializers.BooleanField(help_text="Requested quantity exceeds current stock")


class CartResponseSerializer(serializers.Serializer):
    """Shopping cart response"""

    id = serializers.IntegerField()
    items = CartItemResponseSerializer(many=True)
    items_count = serializers.IntegerField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    has_unavailable = serializers.BooleanField()
    updated_at = serializers.DateTimeField()


# ===== Boutique Response Serializers =====


class BoutiqueSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    seller_id = serializers.IntegerField()
    name = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    theme_color = serializers.CharField()
    template_id = serializers.IntegerField()
    template_name = serializers.CharField()
    is_active = serializers.BooleanField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class TemplateEntrySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    required_rank = serializers.IntegerField()
    required_grade = serializers.CharField()
    accessible = serializers.BooleanField(help_text="Whether the caller's grade unlocks this template")


# ===== Statistics Response Serializers =====


class ProductSalesSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    product_name = serializers.CharField()
    units_sold = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=12, decimal_places=2)


class SalesStatRecordSerializer(serializers.Serializer):
    date = serializers.DateField()
    units_sold = serializers.IntegerField()
    order_count = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=12, decimal_places=2)


class MetricDeltaSerializer(serializers.Serializer):
    current = serializers.DecimalField(max_digits=14, decimal_places=2)
    previous = serializers.DecimalField(max_digits=14, decimal_places=2)
    absolute_change = serializers.DecimalField(max_digits=14, decimal_places=2)
    percentage_change = serializers.DecimalField(max_digits=14, decimal_places=2, allow_null=True)


class PeriodComparisonSerializer(serializers.Serializer):
    units_sold = MetricDeltaSerializer()
    revenue = MetricDeltaSerializer()
    order_count = MetricDeltaSerializer()


class SellerStatisticsSerializer(serializers.Serializer):
    seller_id = serializers.IntegerField()
    period = serializers.CharField()
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    units_sold = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    order_count = serializers.IntegerField()
    average_order_value = serializers.DecimalField(max_digits=12, decimal_places=2)
    top_products = ProductSalesSerializer(many=True)


class StatisticsResponseSerializer(SellerStatisticsSerializer):
    """Seller statistics with the per-day breakdown and previous-period comparison"""

    daily = SalesStatRecordSerializer(many=True)
    comparison = PeriodComparisonSerializer()
