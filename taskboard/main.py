"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .config import Settings, get_settings
from .db import SQLiteTaskTable, SupabaseTaskTable, TaskStore, TaskTable
from .logging_setup import setup_logging
from .routers import tasks
from .services import TaskBoard

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent.parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"


def open_table(settings: Settings) -> TaskTable:
    """Supabase when credentials are configured, local SQLite otherwise."""
    if settings.use_supabase:
        return SupabaseTaskTable.connect(
            settings.supabase_url, settings.supabase_key, settings.tasks_table
        )
    logger.warning("No Supabase credentials, using local SQLite store at %s", settings.sqlite_path)
    table = SQLiteTaskTable(settings.sqlite_path)
    table.init_db()
    return table


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the task board and load it on startup."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    app.title = settings.app_name
    store = TaskStore(open_table(settings), timeout=settings.request_timeout)
    app.state.board = TaskBoard(store)
    await app.state.board.refresh()
    yield


app = FastAPI(
    title="Taskboard",
    description="Personal task tracker",
    version="0.1.0",
    lifespan=lifespan,
)

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

templates = Jinja2Templates(directory=TEMPLATES_DIR)

app.include_router(tasks.router)


@app.get("/", response_class=HTMLResponse)
def index(request: Request):
    """Render the main page."""
    board = tasks.get_board(request)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "app_name": request.app.title,
            "is_loading": board.is_loading,
            "tasks_html": tasks.render_task_list(board.visible_tasks),
            "stats_html": tasks.render_stats(board.stats),
            "tags": board.tags,
            "filters": board.filters,
            "sort": board.sort,
        },
    )


def main():
    """Run the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "taskboard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )


if __name__ == "__main__":
    main()
