import azure.functions as func

from watchwise_service.blueprints.bookmarks_bp import bp as bookmarks_bp
from watchwise_service.blueprints.recommendations_bp import bp as recommendations_bp
from watchwise_service.models.database import init_db

init_db()

app = func.FunctionApp()

app.register_functions(recommendations_bp)
app.register_functions(bookmarks_bp)
