TEST_BUCKET_NAME = "test-secret-cloud-storage"
TEST_REGION = "us-east-1"

# Matches the suffix added to a key whose name is already taken
TIMESTAMP_PATTERN = r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z"
