from .setup import setup_observability, configure_logging
from .metrics import (
    print_orders_created_total,
    print_order_submission_duration_seconds,
    print_order_notifications_total,
    print_model_analyses_total,
    print_upload_rejections_total,
)
