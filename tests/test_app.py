"""End-to-end tests for the App pipeline via the ASGI test client."""

import pytest

from wren import App, AppConfig, Redirect, Request, Response, View
from wren.errors import DuplicateRouteError, HandlerError, NotFoundError
from wren.http.forms import FormData
from wren.templating.renderer import ViewRenderer
from wren.testing import TestClient


class TestHandlerDispatch:
    async def test_reaches_registered_handler(self, make_app) -> None:
        app = make_app()
        calls: list[str] = []

        def list_threads():
            calls.append("list")
            return "threads"

        def create_thread():
            calls.append("create")
            return "created"

        app.register("GET", "/threads", list_threads)
        app.register("POST", "/threads", create_thread)

        async with TestClient(app) as client:
            response = await client.get("/threads")
            assert response.status == 200
            assert response.text == "threads"
            assert calls == ["list"]

            response = await client.post("/threads")
            assert response.text == "created"
            assert calls == ["list", "create"]

    async def test_path_variable_bound_by_name(self, make_app) -> None:
        app = make_app()

        @app.route("/threads/{threadName}")
        def show_thread(threadName: str):
            return f"thread={threadName}"

        async with TestClient(app) as client:
            response = await client.get("/threads/general")
            assert response.text == "thread=general"

    async def test_trailing_slash_ignored(self, make_app) -> None:
        app = make_app()

        @app.route("/threads")
        def list_threads():
            return "threads"

        async with TestClient(app) as client:
            response = await client.get("/threads/")
            assert response.text == "threads"

    async def test_int_annotation_converts(self, make_app) -> None:
        app = make_app()

        @app.route("/posts/{post_id}")
        def show_post(post_id: int):
            return {"id": post_id, "type": type(post_id).__name__}

        async with TestClient(app) as client:
            response = await client.get("/posts/42")
            assert response.content_type.startswith("application/json")
            assert response.text == '{"id": 42, "type": "int"}'

    async def test_failed_conversion_keeps_string(self, make_app) -> None:
        app = make_app()

        @app.route("/posts/{post_id}")
        def show_post(post_id: int):
            return type(post_id).__name__

        async with TestClient(app) as client:
            response = await client.get("/posts/latest")
            assert response.text == "str"

    async def test_request_injected(self, make_app) -> None:
        app = make_app()

        @app.route("/echo")
        def echo(request: Request):
            return f"{request.method} {request.path} q={request.query.get('q')}"

        async with TestClient(app) as client:
            response = await client.get("/echo?q=wren")
            assert response.text == "GET /echo q=wren"

    async def test_async_handler(self, make_app) -> None:
        app = make_app()

        @app.route("/async")
        async def handler():
            return "awaited"

        async with TestClient(app) as client:
            response = await client.get("/async")
            assert response.text == "awaited"

    async def test_body_injected(self, make_app) -> None:
        app = make_app()

        @app.route("/raw", methods=["POST"])
        def receive_raw(body: bytes):
            return Response(body=body[::-1], content_type="text/plain")

        async with TestClient(app) as client:
            response = await client.post("/raw", body=b"abc")
            assert response.text == "cba"

    async def test_form_injected(self, make_app) -> None:
        app = make_app()

        @app.route("/posts", methods=["POST"])
        def create_post(form: FormData):
            return f"{form['title']}|{form.get('missing', '-')}"

        async with TestClient(app) as client:
            response = await client.post("/posts", form={"title": "<b>hi</b>"})
            assert response.text == "<b>hi</b>|-"

    async def test_form_with_wrong_media_type_is_415(self, make_app) -> None:
        app = make_app()

        @app.route("/posts", methods=["POST"])
        def create_post(form: FormData):
            return "created"

        async with TestClient(app) as client:
            response = await client.post(
                "/posts", headers={"Content-Type": "application/json"}, body=b'{"title": "hi"}'
            )
            assert response.status == 415

    async def test_form_with_invalid_utf8_is_400(self, make_app) -> None:
        app = make_app()

        @app.route("/posts", methods=["POST"])
        def create_post(form: FormData):
            return "created"

        async with TestClient(app) as client:
            response = await client.post(
                "/posts",
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                body=b"name=\xff",
            )
            assert response.status == 400

    async def test_body_over_limit_is_413(self, make_app) -> None:
        app = make_app(max_content_length=4)

        @app.route("/raw", methods=["POST"])
        def receive_raw(body: bytes):
            return "accepted"

        async with TestClient(app) as client:
            response = await client.post("/raw", body=b"too long")
            assert response.status == 413

    async def test_method_not_allowed(self, make_app) -> None:
        app = make_app()

        @app.route("/threads", methods=["GET", "POST"])
        def threads():
            return "ok"

        async with TestClient(app) as client:
            response = await client.request("DELETE", "/threads")
            assert response.status == 405
            assert response.header("allow") == "GET, POST"

    async def test_head_uses_get_route(self, make_app) -> None:
        app = make_app()

        @app.route("/threads")
        def threads():
            return "hello"

        async with TestClient(app) as client:
            response = await client.head("/threads")
            assert response.status == 200
            assert response.body == b""
            assert response.header("content-length") == "5"


class TestViewsAndRedirects:
    async def test_view_rendered_with_escaping(self, make_app) -> None:
        app = make_app()

        @app.route("/")
        def page():
            return View("page.html", title="<h1>x</h1>", items=["a", "b"])

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 200
            assert response.content_type.startswith("text/html")
            assert "&lt;h1&gt;x&lt;/h1&gt;" in response.text
            assert "<h1>x</h1>" not in response.text
            assert "<li>a</li>" in response.text
            assert "<li>b</li>" in response.text

    async def test_raw_filter_in_view(self, make_app) -> None:
        app = make_app()

        @app.route("/")
        def page():
            return View("escape.html", value="<em>ok</em>")

        async with TestClient(app) as client:
            response = await client.get("/")
            assert '<p class="escaped">&lt;em&gt;ok&lt;/em&gt;</p>' in response.text
            assert '<p class="raw"><em>ok</em></p>' in response.text

    async def test_redirect_never_renders(self, make_app, monkeypatch) -> None:
        app = make_app()
        rendered: list[object] = []

        def spy(self: ViewRenderer, view: View) -> str:
            rendered.append(view)
            return ""

        monkeypatch.setattr(ViewRenderer, "render", spy)

        @app.route("/threads", methods=["POST"])
        def create_thread():
            return Redirect("/threads/general")

        async with TestClient(app) as client:
            response = await client.post("/threads")
            assert response.status == 302
            assert response.header("location") == "/threads/general"
            assert response.body == b""

        assert rendered == []

    async def test_redirect_custom_status(self, make_app) -> None:
        app = make_app()

        @app.route("/old")
        def old():
            return Redirect("/new", status=301)

        async with TestClient(app) as client:
            response = await client.get("/old")
            assert response.status == 301
            assert response.header("location") == "/new"

    async def test_missing_template_is_500(self, make_app) -> None:
        app = make_app()

        @app.route("/")
        def page():
            return View("does-not-exist.html")

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 500
            assert "does-not-exist.html" not in response.text

    async def test_missing_template_detail_in_debug(self, make_app) -> None:
        app = make_app(debug=True)

        @app.route("/")
        def page():
            return View("does-not-exist.html")

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 500
            assert "does-not-exist.html" in response.text

    async def test_template_filter_registered(self, make_app) -> None:
        app = make_app()

        @app.template_filter()
        def shout(value: str) -> str:
            return value.upper() + "!"

        @app.route("/")
        def page():
            return View("shout.html", word="hey")

        async with TestClient(app) as client:
            response = await client.get("/")
            assert "<p>HEY!</p>" in response.text

    async def test_tuple_return_sets_status(self, make_app) -> None:
        app = make_app()

        @app.route("/created", methods=["POST"])
        def created():
            return "made", 201, {"X-Thread": "general"}

        async with TestClient(app) as client:
            response = await client.post("/created")
            assert response.status == 201
            assert response.header("x-thread") == "general"


class TestErrors:
    async def test_handler_exception_is_500(self, make_app) -> None:
        app = make_app()

        @app.route("/boom")
        def boom():
            raise KeyError("thread")

        async with TestClient(app) as client:
            response = await client.get("/boom")
            assert response.status == 500
            assert response.text == "Internal Server Error"

    async def test_handler_error_chains_cause(self, make_app) -> None:
        app = make_app()
        seen: list[Exception] = []

        @app.route("/boom")
        def boom():
            raise KeyError("thread")

        @app.error(HandlerError)
        def on_handler_error(request, exc):
            seen.append(exc)
            return "handled"

        async with TestClient(app) as client:
            response = await client.get("/boom")
            assert response.status == 500
            assert response.text == "handled"

        assert isinstance(seen[0], HandlerError)
        assert isinstance(seen[0].__cause__, KeyError)
        assert "boom" in seen[0].detail

    async def test_handler_http_error_keeps_status(self, make_app) -> None:
        app = make_app()

        @app.route("/threads/{threadName}")
        def show_thread(threadName: str):
            raise NotFoundError(f"No thread {threadName!r}")

        async with TestClient(app) as client:
            response = await client.get("/threads/missing")
            assert response.status == 404
            assert "missing" in response.text

    async def test_custom_404_handler(self, make_app) -> None:
        app = make_app(static_dir=None)

        @app.error(404)
        def not_found(request):
            return f"nothing at {request.path}"

        async with TestClient(app) as client:
            response = await client.get("/nowhere")
            assert response.status == 404
            assert response.text == "nothing at /nowhere"

    async def test_custom_405_handler_keeps_allow_header(self, make_app) -> None:
        app = make_app()

        @app.route("/threads", methods=["GET", "POST"])
        def threads():
            return "ok"

        @app.error(405)
        def not_allowed():
            return "nope"

        async with TestClient(app) as client:
            response = await client.request("DELETE", "/threads")
            assert response.status == 405
            assert response.text == "nope"
            assert response.header("allow") == "GET, POST"

    async def test_custom_handler_header_wins_over_error_header(self, make_app) -> None:
        app = make_app()

        @app.route("/threads")
        def threads():
            return "ok"

        @app.error(405)
        def not_allowed():
            return Response("nope", status=405, headers=(("Allow", "GET, HEAD"),))

        async with TestClient(app) as client:
            response = await client.request("DELETE", "/threads")
            assert response.status == 405
            assert [v for k, v in response.headers if k == "allow"] == ["GET, HEAD"]

    async def test_unsupported_return_is_500(self, make_app) -> None:
        app = make_app()

        @app.route("/odd")
        def odd():
            return 3.14

        async with TestClient(app) as client:
            response = await client.get("/odd")
            assert response.status == 500


class TestRegistration:
    def test_duplicate_fails_at_registration(self, make_app) -> None:
        app = make_app()
        app.register("GET", "/threads", lambda: "a")

        with pytest.raises(DuplicateRouteError):
            app.register("GET", "/threads", lambda: "b")

    def test_same_pattern_other_method_allowed(self, make_app) -> None:
        app = make_app()
        app.register("GET", "/threads", lambda: "a")
        app.register("POST", "/threads", lambda: "b")
        assert [r.method for r in app.routes] == ["GET", "POST"]

    def test_route_decorator_registers_each_method(self, make_app) -> None:
        app = make_app()

        @app.route("/sample", methods=["GET", "POST"], name="sample")
        def sample():
            return "ok"

        assert [(r.method, r.pattern, r.name) for r in app.routes] == [
            ("GET", "/sample", "sample"),
            ("POST", "/sample", "sample"),
        ]

    def test_cannot_register_after_freeze(self, make_app) -> None:
        app = make_app()
        app._ensure_frozen()

        with pytest.raises(RuntimeError, match="Cannot modify the app"):
            app.register("GET", "/late", lambda: "late")

        with pytest.raises(RuntimeError):
            app.error(404)(lambda: "nope")

    def test_renderer_is_shared(self, make_app) -> None:
        app = make_app()
        assert app.renderer is app.renderer

    def test_default_config(self) -> None:
        app = App()
        assert app.config == AppConfig()


class TestLifespan:
    async def test_hooks_run_in_order(self, make_app) -> None:
        app = make_app()
        events: list[str] = []

        @app.on_startup
        def first():
            events.append("startup-1")

        @app.on_startup
        async def second():
            events.append("startup-2")

        @app.on_shutdown
        def stop():
            events.append("shutdown")

        async with TestClient(app):
            assert events == ["startup-1", "startup-2"]

        assert events == ["startup-1", "startup-2", "shutdown"]

    async def test_asgi_lifespan_protocol(self, make_app) -> None:
        app = make_app()
        events: list[str] = []
        app.on_startup(lambda: events.append("up"))

        incoming = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent: list[dict] = []

        async def receive():
            return next(incoming)

        async def send(message):
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)

        assert events == ["up"]
        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    async def test_startup_failure_reported(self, make_app) -> None:
        app = make_app()

        @app.on_startup
        def broken():
            raise RuntimeError("no database")

        incoming = iter([{"type": "lifespan.startup"}])
        sent: list[dict] = []

        async def receive():
            return next(incoming)

        async def send(message):
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)

        assert sent[0]["type"] == "lifespan.startup.failed"
        assert "no database" in sent[0]["message"]


class TestErrorHandlerFailures:
    async def test_failing_error_handler_falls_back(self, make_app) -> None:
        app = make_app(static_dir=None)

        @app.error(404)
        def broken_page():
            return View("missing-404.html")

        async with TestClient(app) as client:
            response = await client.get("/nowhere")
            assert response.status == 404
            assert response.content_type.startswith("text/plain")

    async def test_async_error_handler(self, make_app) -> None:
        app = make_app()

        @app.route("/boom")
        def boom():
            raise ValueError("bad")

        @app.error(500)
        async def on_500():
            return "sorry", 503

        async with TestClient(app) as client:
            response = await client.get("/boom")
            assert response.status == 503
            assert response.text == "sorry"
