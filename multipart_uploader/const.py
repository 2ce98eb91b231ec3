"""Constants for multipart upload planning."""

MB = 1024 * 1024

# Multipart APIs reject parts smaller than this, except the final one
MIN_PART_SIZE = 5 * MB
MAX_NUMBER_OF_PARTS = 10000

# Log the first, the last and every Nth completed part
PART_LOG_INTERVAL = 100
