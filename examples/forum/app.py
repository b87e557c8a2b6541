"""Forum — threads and posts with redirect-after-post.

Demonstrates the whole core:
1. Explicit route registration with a path variable (``{threadName}``)
2. Handlers that return either a ``View`` or a ``Redirect``
3. HTML escaping by default, with ``raw`` for trusted markup
4. Static files served for anything no route claims

Run:
    pip install wren[server]
    python app.py
"""

import threading
from dataclasses import dataclass
from pathlib import Path

from wren import App, AppConfig, NotFoundError, Redirect, View, raw
from wren.http.forms import FormData

HERE = Path(__file__).parent

# ---------------------------------------------------------------------------
# In-memory store — shared by every request, so guarded by a lock
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Post:
    author: str
    body: str


_lock = threading.Lock()
_threads: dict[str, list[Post]] = {}


def _thread_names() -> list[str]:
    with _lock:
        return sorted(_threads)


def _posts(thread_name: str) -> list[Post] | None:
    with _lock:
        posts = _threads.get(thread_name)
        return None if posts is None else list(posts)


def _add_post(thread_name: str, post: Post) -> None:
    with _lock:
        _threads.setdefault(thread_name, []).append(post)


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = App(config=AppConfig(template_dir=HERE / "templates", static_dir=HERE / "static"))


def index():
    return View(
        "index.html",
        threads=_thread_names(),
        banner=raw('<img src="/logo.svg" alt="forum">'),
    )


def show_thread(threadName: str):
    posts = _posts(threadName)
    if posts is None:
        raise NotFoundError(f"No thread named {threadName!r}")
    return View("thread.html", name=threadName, posts=posts)


def create_thread(form: FormData):
    name = (form.get("name") or "").strip()
    if not name:
        return Redirect("/")
    with _lock:
        _threads.setdefault(name, [])
    return Redirect(f"/threads/{name}")


def add_post(threadName: str, form: FormData):
    if _posts(threadName) is None:
        raise NotFoundError(f"No thread named {threadName!r}")
    body = (form.get("body") or "").strip()
    if body:
        _add_post(threadName, Post(author=form.get("author") or "anonymous", body=body))
    return Redirect(f"/threads/{threadName}")


def sample_get():
    return "GET /sample"


def sample_post():
    return "POST /sample"


app.register("GET", "/", index, name="index")
app.register("POST", "/threads", create_thread, name="create_thread")
app.register("GET", "/threads/{threadName}", show_thread, name="thread")
app.register("POST", "/threads/{threadName}", add_post, name="add_post")
app.register("GET", "/sample", sample_get)
app.register("POST", "/sample", sample_post)


@app.error(404)
def not_found(request, exc):
    return View("404.html", path=request.path, detail=exc.detail)


if __name__ == "__main__":
    app.run()
