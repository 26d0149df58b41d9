"""Constants shared by the test suite."""

TEST_BUCKET_NAME = "test-bucket"
OTHER_BUCKET_NAME = "other-bucket"
TEST_REGION = "us-east-1"

TEST_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"
TEST_USER_ID = "user-123"
TEST_USER_EMAIL = "admin@demo.com"
