from mangum import Mangum
from main import app

# Tables and the bootstrap admin are expected to exist (alembic upgrade head, seed.py)
handler = Mangum(app, lifespan="off")


def lambda_handler(event, context):
    return handler(event, context)
