"""Lambda handler for the Products API using Mangum."""
from mangum import Mangum
from products_api.main import create_app

# Create FastAPI app
app = create_app()

# Lifespan events close the document store when the runtime shuts down
handler = Mangum(app, lifespan="auto")

# Export handler for Lambda runtime
lambda_handler = handler
