from prometheus_client import Counter, Histogram

# Business Metrics
print_orders_created_total = Counter(
    "print_orders_created_total",
    "Total print orders persisted",
    ["delivery_method"]  # Labels: 'delivery', 'meetup'
)

print_order_submission_duration_seconds = Histogram(
    "print_order_submission_duration_seconds",
    "Order submission duration in seconds (validation, pricing, storage, notification)"
)

print_order_notifications_total = Counter(
    "print_order_notifications_total",
    "Order notification emails by outcome",
    ["status"]  # Labels: 'sent', 'failed', 'skipped'
)

print_model_analyses_total = Counter(
    "print_model_analyses_total",
    "Model files run through the estimator"
)

print_upload_rejections_total = Counter(
    "print_upload_rejections_total",
    "Rejected model uploads",
    ["reason"]  # Labels: 'extension', 'too_large', 'empty', 'missing_name'
)
