"""Task API router."""

from datetime import datetime, timezone
from html import escape

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from pydantic import ValidationError

from ..models import (
    FilterCriteria,
    FilterUpdate,
    Priority,
    SortCriteria,
    SortUpdate,
    TagListResponse,
    Task,
    TaskCreate,
    TaskListResponse,
    TaskStats,
    TaskUpdate,
    is_overdue,
)
from ..services import TaskBoard

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

STORE_UNAVAILABLE = "Task store unavailable"


def get_board(request: Request) -> TaskBoard:
    """The application's task board."""
    return request.app.state.board


def require_task(board: TaskBoard, task_id: str) -> Task:
    task = board.get(task_id)
    if task is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found",
        )
    return task


def store_failure() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=STORE_UNAVAILABLE,
    )


async def mutation_failure(board: TaskBoard, task_id: str) -> HTTPException:
    """Error for a failed write on a cached task.

    The store answers the same way for an outage and for a row removed by
    another client, so reload once: a task missing afterwards is a 404.
    """
    if await board.refresh() and board.get(task_id) is None:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Task not found",
        )
    return store_failure()


# =============================================================================
# Helper Functions
# =============================================================================


def render_task_item(task: Task, now: datetime | None = None) -> str:
    """Render a single task as HTML."""
    task_id = escape(task.id)
    classes = ["task-item", f"priority-{task.priority.value}"]
    if task.completed:
        classes.append("completed")
    if is_overdue(task, now):
        classes.append("overdue")
    tags = "".join(f'<span class="tag">{escape(tag)}</span>' for tag in task.tags)
    due = (
        f'<time class="task-due">{task.due_date.date().isoformat()}</time>'
        if task.due_date
        else ""
    )
    description = (
        f'<p class="task-description">{escape(task.description)}</p>' if task.description else ""
    )
    return f"""
    <li id="task-{task_id}" class="{' '.join(classes)}">
        <button
            class="complete-btn"
            hx-patch="/api/tasks/{task_id}/htmx/toggle"
            hx-target="#task-{task_id}"
            hx-swap="outerHTML"
        ></button>
        <span class="task-title">{escape(task.title)}</span>
        {description}{due}{tags}
        <button
            class="delete-btn"
            hx-delete="/api/tasks/{task_id}/htmx"
            hx-target="#task-{task_id}"
            hx-swap="outerHTML"
        >&times;</button>
    </li>
    """


def render_task_list(tasks: list[Task]) -> str:
    """Render task list as HTML."""
    if not tasks:
        return '<li class="empty-message">No tasks</li>'
    now = datetime.now(timezone.utc)
    return "".join(render_task_item(task, now) for task in tasks)


def render_stats(stats: TaskStats) -> str:
    """Render the progress summary as HTML."""
    return f"""
    <div id="stats" class="stats">
        <span>{stats.completed}/{stats.total} done</span>
        <progress max="100" value="{stats.completion_rate:.0f}"></progress>
        <span>{stats.completion_rate:.0f}%</span>
    </div>
    """


def parse_tags(raw: str) -> list[str]:
    return [tag for tag in raw.split(",") if tag.strip()]


# =============================================================================
# HTMX Endpoints (HTML Fragments) - Must be defined BEFORE /{task_id} routes
# =============================================================================


@router.get("/htmx", response_class=HTMLResponse)
def list_tasks_htmx(board: TaskBoard = Depends(get_board)):
    """Get the visible tasks as HTML fragment."""
    return render_task_list(board.visible_tasks)


@router.post("/htmx", response_class=HTMLResponse)
async def create_task_htmx(
    title: str = Form(...),
    description: str = Form(""),
    priority: Priority = Form(Priority.MEDIUM),
    tags: str = Form(""),
    due_date: str = Form(""),
    board: TaskBoard = Depends(get_board),
):
    """Create a task and return HTML fragment."""
    try:
        draft = TaskCreate(
            title=title,
            description=description,
            priority=priority,
            tags=parse_tags(tags),
            due_date=due_date or None,
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.errors(include_url=False, include_context=False),
        )
    task = await board.add(draft)
    if task is None:
        raise store_failure()
    return render_task_item(task)


@router.get("/htmx/stats", response_class=HTMLResponse)
def stats_htmx(board: TaskBoard = Depends(get_board)):
    """Get the progress summary as HTML fragment."""
    return render_stats(board.stats)


# =============================================================================
# REST API Endpoints (JSON)
# =============================================================================


@router.get("", response_model=TaskListResponse)
def list_tasks(board: TaskBoard = Depends(get_board)):
    """Get the tasks matching the current filters, in the current order."""
    tasks = board.visible_tasks
    return TaskListResponse(tasks=tasks, count=len(tasks), is_loading=board.is_loading)


@router.get("/all", response_model=TaskListResponse)
def list_all_tasks(board: TaskBoard = Depends(get_board)):
    """Get every task, unfiltered."""
    return TaskListResponse(
        tasks=board.tasks, count=len(board.tasks), is_loading=board.is_loading
    )


@router.get("/stats", response_model=TaskStats)
def get_stats(board: TaskBoard = Depends(get_board)):
    """Get completion statistics over all tasks."""
    return board.stats


@router.get("/tags", response_model=TagListResponse)
def list_tags(board: TaskBoard = Depends(get_board)):
    """Get the tags currently in use."""
    return TagListResponse(tags=board.tags)


@router.post("/refresh", status_code=status.HTTP_204_NO_CONTENT)
async def refresh(board: TaskBoard = Depends(get_board)):
    """Reload tasks and tags from the store."""
    if not await board.refresh():
        raise store_failure()


@router.get("/filters", response_model=FilterCriteria)
def get_filters(board: TaskBoard = Depends(get_board)):
    return board.filters


@router.patch("/filters", response_model=FilterCriteria)
def update_filters(filter_data: FilterUpdate, board: TaskBoard = Depends(get_board)):
    """Change some of the filters; omitted fields keep their value."""
    return board.update_filters(**filter_data.model_dump(exclude_unset=True, exclude_none=True))


@router.delete("/filters", response_model=FilterCriteria)
def reset_filters(board: TaskBoard = Depends(get_board)):
    """Restore the default filters."""
    return board.reset_filters()


@router.get("/sort", response_model=SortCriteria)
def get_sort(board: TaskBoard = Depends(get_board)):
    return board.sort


@router.patch("/sort", response_model=SortCriteria)
def update_sort(sort_data: SortUpdate, board: TaskBoard = Depends(get_board)):
    """Change the sort key and/or direction."""
    return board.update_sort(**sort_data.model_dump(exclude_unset=True, exclude_none=True))


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task_endpoint(task_data: TaskCreate, board: TaskBoard = Depends(get_board)):
    """Create a new task."""
    task = await board.add(task_data)
    if task is None:
        raise store_failure()
    return task


@router.get("/{task_id}", response_model=Task)
def get_task(task_id: str, board: TaskBoard = Depends(get_board)):
    """Get a task by ID."""
    return require_task(board, task_id)


@router.patch("/{task_id}", response_model=Task)
async def update_task_endpoint(
    task_id: str, task_data: TaskUpdate, board: TaskBoard = Depends(get_board)
):
    """Update some fields of a task; ``null`` clears the due date or description."""
    require_task(board, task_id)
    task = await board.edit(task_id, task_data)
    if task is None:
        raise await mutation_failure(board, task_id)
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task_endpoint(task_id: str, board: TaskBoard = Depends(get_board)):
    """Delete a task."""
    require_task(board, task_id)
    if not await board.remove(task_id):
        raise await mutation_failure(board, task_id)


@router.post("/{task_id}/toggle", response_model=Task)
async def toggle_task_endpoint(task_id: str, board: TaskBoard = Depends(get_board)):
    """Flip a task's completion state."""
    require_task(board, task_id)
    task = await board.toggle(task_id)
    if task is None:
        raise await mutation_failure(board, task_id)
    return task


# =============================================================================
# HTMX Endpoints with task_id (must be after static /htmx routes)
# =============================================================================


@router.patch("/{task_id}/htmx/toggle", response_class=HTMLResponse)
async def toggle_task_htmx(task_id: str, board: TaskBoard = Depends(get_board)):
    """Flip a task's completion state and return the re-rendered item."""
    require_task(board, task_id)
    task = await board.toggle(task_id)
    if task is None:
        raise await mutation_failure(board, task_id)
    return render_task_item(task)


@router.delete("/{task_id}/htmx", response_class=HTMLResponse)
async def delete_task_htmx(task_id: str, board: TaskBoard = Depends(get_board)):
    """Delete a task and return empty."""
    require_task(board, task_id)
    if not await board.remove(task_id):
        raise await mutation_failure(board, task_id)
    return ""
