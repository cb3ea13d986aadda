from prometheus_client import Counter, Histogram


# Order Metrics
orders_placed_total = Counter("marketplace_orders_placed_total", "Total checkout attempts", ["status"])
order_value = Histogram(
    "marketplace_order_value",
    "Order value distribution",
    buckets=[10, 50, 100, 200, 500, 1000, 2000, 5000, float("inf")],
)
order_transitions_total = Counter(
    "marketplace_order_transitions_total", "Order status transitions", ["from_status", "to_status"]
)
order_transition_rejections_total = Counter(
    "marketplace_order_transition_rejections_total", "Rejected order status transitions", ["to_status"]
)

# Stock Metrics
stock_reservations_total = Counter("marketplace_stock_reservations_total", "Stock reservations", ["status"])
stock_releases_total = Counter("marketplace_stock_releases_total", "Stock releases", ["reason"])

# Integrity
data_integrity_alarms_total = Counter(
    "marketplace_data_integrity_alarms_total", "Ledger/aggregate divergences detected", ["kind"]
)

# Access control
template_access_denials_total = Counter(
    "marketplace_template_access_denials_total", "Template links refused for insufficient grade"
)

# Performance Metrics
statistics_duration = Histogram("marketplace_statistics_seconds", "Seller statistics aggregation time")
