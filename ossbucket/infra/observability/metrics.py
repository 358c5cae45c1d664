from prometheus_client import Counter, Histogram

# Low-cardinality labels only: bucket name and operation, never object keys
OPERATIONS = Counter(
    "objstore_bucket_operations_total",
    "Total number of bucket operations",
    ["bucket", "operation"],
)

OPERATION_FAILURES = Counter(
    "objstore_bucket_operation_failures_total",
    "Total number of bucket operations that failed",
    ["bucket", "operation"],
)

OPERATION_DURATION = Histogram(
    "objstore_bucket_operation_duration_seconds",
    "Duration of bucket operations in seconds",
    ["bucket", "operation"],
)

MULTIPART_PARTS = Counter(
    "objstore_bucket_multipart_parts_total",
    "Total number of multipart parts uploaded",
    ["bucket"],
)
