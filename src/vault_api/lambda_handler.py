"""Lambda handler for the storage API using Mangum."""
from mangum import Mangum
from vault_api.main import create_app

# S3-backed in aws-prod; the in-memory store does not survive between invocations
app = create_app()

# Wrap with Mangum for Lambda compatibility
handler = Mangum(app, lifespan="off")

# Export handler for Lambda runtime
lambda_handler = handler
