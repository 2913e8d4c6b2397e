"""Tests for waypoint.app — registration, dispatch, errors and lifecycle."""

import pytest

from waypoint.app import App
from waypoint.config import AppConfig
from waypoint.context import AppContext, RequestContext
from waypoint.errors import (
    ConfigurationError,
    DuplicateRouteNameError,
    HTTPError,
    InvalidRoutePatternError,
    UnknownRouteNameError,
)
from waypoint.http.response import Redirect, Response
from waypoint.testing import TestClient


class TestRegistration:
    def test_route_decorator(self) -> None:
        app = App()

        @app.route("/")
        def index():
            return "hello"

        assert len(app.routes) == 1
        assert app.routes[0].pattern == "/"
        assert app.routes[0].methods == "GET"
        assert app.routes[0].target is index

    def test_route_with_method_list(self) -> None:
        app = App()

        @app.route("/users", methods=["GET", "POST"], name="users")
        def users():
            return "users"

        assert app.routes[0].methods == "GET|POST"
        assert app.routes[0].name == "users"

    def test_map(self) -> None:
        app = App()
        route = app.map("GET|PUT", "/items/[i:id]", lambda id: id, "item")
        assert route.name == "item"
        assert app.routes == (route,)

    @pytest.mark.parametrize("verb", ["get", "post", "put", "patch", "delete"])
    def test_verb_helpers(self, verb: str) -> None:
        app = App()
        getattr(app, verb)("/thing")(lambda: "ok")
        route = app.routes[0]
        assert route.methods == verb.upper()
        assert route.name == f"/thing-{verb.upper()}"

    def test_verb_helper_explicit_name(self) -> None:
        app = App()
        app.get("/about", name="about")(lambda: "ok")
        assert app.routes[0].name == "about"
        assert app.url_for("about") == "/about"

    def test_auto_name_collision(self) -> None:
        app = App()
        app.get("/about")(lambda: "a")
        with pytest.raises(DuplicateRouteNameError):
            app.get("/about")(lambda: "b")

    def test_same_pattern_different_verbs(self) -> None:
        app = App()
        app.get("/form")(lambda: "show")
        app.post("/form")(lambda: "submit")
        assert [r.name for r in app.routes] == ["/form-GET", "/form-POST"]

    def test_duplicate_explicit_name(self) -> None:
        app = App()
        app.map("GET", "/a", lambda: "a", "page")
        with pytest.raises(DuplicateRouteNameError):
            app.map("GET", "/b", lambda: "b", "page")

    def test_error_decorator(self) -> None:
        app = App()

        @app.error(404)
        def not_found():
            return "Not found"

        assert app.error(500)(not_found) is not_found


class TestFreeze:
    def test_registration_after_dispatch_rejected(self) -> None:
        app = App()
        app.get("/")(lambda: "ok")
        app.dispatch("GET", "/")
        with pytest.raises(ConfigurationError):
            app.get("/late")(lambda: "late")

    def test_explicit_freeze(self) -> None:
        app = App()
        app.freeze()
        with pytest.raises(ConfigurationError):
            app.map("GET", "/", lambda: "ok")
        with pytest.raises(ConfigurationError):
            app.add_middleware(lambda req, nxt: nxt(req))
        with pytest.raises(ConfigurationError):
            app.set_global("x", 1)
        with pytest.raises(ConfigurationError):
            app.register_module("db", object())
        with pytest.raises(ConfigurationError):
            app.register_match_types({"x": "x"})
        with pytest.raises(ConfigurationError):
            app.error(404)(lambda: "nf")

    def test_freeze_is_idempotent(self) -> None:
        app = App()
        app.freeze()
        context = app.context
        app.freeze()
        assert app.context is context

    def test_invalid_pattern_fails_at_freeze(self) -> None:
        app = App()
        app.get("/users/[i:id](")(lambda id: id)
        with pytest.raises(InvalidRoutePatternError):
            app.freeze()

    def test_invalid_pattern_never_served(self) -> None:
        app = App()
        app.get("/ok")(lambda: "ok")
        app.map("GET", "@^/broken/(", lambda: "broken")
        with pytest.raises(InvalidRoutePatternError):
            app.dispatch("GET", "/ok")


class TestDispatch:
    def test_str_handler(self) -> None:
        app = App()
        app.get("/")(lambda: "home")
        response = TestClient(app).get("/")
        assert response.status == 200
        assert response.text == "home"
        assert "text/html" in response.content_type

    def test_path_params_converted(self) -> None:
        app = App()

        @app.get("/users/[i:id]")
        def user(id: int):
            return {"id": id, "type": type(id).__name__}

        response = TestClient(app).get("/users/42")
        assert response.status == 200
        assert '"id": 42' in response.text
        assert '"type": "int"' in response.text

    def test_failed_conversion_keeps_string(self) -> None:
        app = App()

        @app.get("/n/[:value]")
        def number(value: int):
            return type(value).__name__

        assert TestClient(app).get("/n/abc").text == "str"

    def test_unannotated_params_are_strings(self) -> None:
        app = App()

        @app.get("/pair/[i:a]/[i:b]")
        def pair(a, b):
            return a + b

        assert TestClient(app).get("/pair/1/2").text == "12"

    def test_optional_param_default(self) -> None:
        app = App()

        @app.get("/posts/[i:page]?")
        def posts(page: int = 1):
            return f"page {page}"

        client = TestClient(app)
        assert client.get("/posts/").text == "page 1"
        assert client.get("/posts/3").text == "page 3"

    def test_request_injection(self) -> None:
        app = App()

        @app.get("/search")
        def search(request: RequestContext):
            return f"{request.method} {request.query.get('q')}"

        assert TestClient(app).get("/search", query={"q": "routes"}).text == "GET routes"

    def test_request_by_name(self) -> None:
        app = App()

        @app.get("/who/[:name]")
        def who(request):
            return request.param("name")

        assert TestClient(app).get("/who/ada").text == "ada"

    def test_app_context_injection(self) -> None:
        app = App()
        app.set_global("site", "Waypoint")
        app.register_module("greeter", lambda name: f"hi {name}")

        @app.get("/hello/[:name]")
        def hello(name: str, ctx: AppContext):
            return f"{ctx.get('site')}: {ctx.module('greeter')(name)}"

        assert TestClient(app).get("/hello/bob").text == "Waypoint: hi bob"

    def test_post_json(self) -> None:
        app = App()

        @app.post("/echo")
        def echo(request: RequestContext):
            return request.json()

        response = TestClient(app).post("/echo", json={"a": 1})
        assert response.text == '{"a": 1}'

    def test_method_mismatch_is_404(self) -> None:
        app = App()
        app.post("/submit")(lambda: "ok")
        response = TestClient(app).get("/submit")
        assert response.status == 404
        assert response.text == "Cannot GET /submit"

    def test_not_found_message(self) -> None:
        response = TestClient(App()).get("/nope")
        assert response.status == 404
        assert response.text == "Cannot GET /nope"
        assert "text/plain" in response.content_type

    def test_none_is_204(self) -> None:
        app = App()
        app.delete("/items/[i:id]")(lambda id: None)
        assert TestClient(app).delete("/items/1").status == 204

    def test_tuple_return(self) -> None:
        app = App()
        app.post("/items")(lambda: ({"created": True}, 201, {"Location": "/items/1"}))
        response = TestClient(app).post("/items")
        assert response.status == 201
        assert response.header("Location") == "/items/1"

    def test_redirect_return(self) -> None:
        app = App()
        app.get("/old")(lambda: Redirect("/new", status=301))
        response = TestClient(app).get("/old")
        assert response.status == 301
        assert response.header("Location") == "/new"

    def test_response_return(self) -> None:
        app = App()
        app.get("/raw")(lambda: Response("x").with_header("X-Custom", "1"))
        assert TestClient(app).get("/raw").header("X-Custom") == "1"

    def test_first_route_wins(self) -> None:
        app = App()
        app.get("/users/new")(lambda: "form")
        app.get("/users/[:name]")(lambda name: f"user {name}")
        client = TestClient(app)
        assert client.get("/users/new").text == "form"
        assert client.get("/users/bob").text == "user bob"

    def test_match_without_dispatch(self) -> None:
        app = App()
        app.get("/users/[i:id]")(lambda id: id)
        match = app.match("/users/5")
        assert match is not None
        assert match.params == {"id": "5"}
        assert app.match("/users/5", "POST") is None


class TestMethods:
    def test_substring_methods_by_default(self) -> None:
        app = App()
        app.patch("/doc")(lambda: "patched")
        assert app.dispatch("AT", "/doc").text == "patched"

    def test_strict_methods(self) -> None:
        app = App(AppConfig(strict_methods=True))
        app.patch("/doc")(lambda: "patched")
        assert app.dispatch("AT", "/doc").status == 404
        assert app.dispatch("patch", "/doc").text == "patched"

    def test_custom_match_types_from_config(self) -> None:
        app = App(AppConfig(match_types={"slug": r"[a-z-]++"}))
        app.get("/p/[slug:s]")(lambda s: s)
        client = TestClient(app)
        assert client.get("/p/hello-there").text == "hello-there"
        assert client.get("/p/UPPER").status == 404

    def test_register_match_types(self) -> None:
        app = App()
        app.register_match_types({"year": r"[0-9]{4}"})
        app.get("/archive/[year:y]")(lambda y: y)
        client = TestClient(app)
        assert client.get("/archive/2024").text == "2024"
        assert client.get("/archive/24").status == 404


class TestBasePath:
    def test_dispatch_under_base_path(self) -> None:
        app = App(AppConfig(base_path="/blog"))
        app.get("/posts/[i:id]")(lambda id: f"post {id}")
        assert app.dispatch("GET", "/blog/posts/3").text == "post 3"

    def test_test_client_prepends_base_path(self) -> None:
        app = App(AppConfig(base_path="/blog"))
        app.get("/")(lambda: "index")
        assert TestClient(app).get("/").text == "index"

    def test_request_path_excludes_base_path(self) -> None:
        app = App(AppConfig(base_path="/blog"))

        @app.get("/where")
        def where(request: RequestContext):
            return f"{request.path} {request.target}"

        assert TestClient(app).get("/where").text == "/where /blog/where"

    def test_url_for(self) -> None:
        app = App(AppConfig(base_path="/blog"))
        app.get("/posts/[i:id]/[:slug]?", name="post")(lambda id, slug=None: "")
        assert app.url_for("post", id=3, slug="hello") == "/blog/posts/3/hello"
        assert app.url_for("post", id=3) == "/blog/posts/3"

    def test_url_for_unknown(self) -> None:
        with pytest.raises(UnknownRouteNameError):
            App().url_for("nope")

    def test_asset_url(self) -> None:
        app = App(AppConfig(base_path="/blog", static_url="/assets/"))
        assert app.asset_url("/css/site.css") == "/blog/assets/css/site.css"
        assert App().asset_url("app.js") == "/static/app.js"

    def test_redirect_helper_prepends_base_path(self) -> None:
        app = App(AppConfig(base_path="/blog"))
        app.post("/logout")(lambda: app.redirect("/login"))
        response = TestClient(app).post("/logout")
        assert response.status == 302
        assert response.header("Location") == "/blog/login"

    def test_redirect_helper_status(self) -> None:
        redirect = App().redirect("/new", status=301)
        assert redirect == Redirect("/new", status=301)

    def test_plain_redirect_is_unchanged(self) -> None:
        app = App(AppConfig(base_path="/blog"))
        app.get("/out")(lambda: Redirect("https://example.com/"))
        assert TestClient(app).get("/out").header("Location") == "https://example.com/"


class TestErrorHandling:
    def test_http_error_from_handler(self) -> None:
        app = App()

        @app.get("/secret")
        def secret():
            raise HTTPError(status=403, detail="Forbidden", headers=(("X-Reason", "role"),))

        response = TestClient(app).get("/secret")
        assert response.status == 403
        assert response.text == "Forbidden"
        assert response.header("X-Reason") == "role"

    def test_error_handler_for_status(self) -> None:
        app = App()

        @app.error(404)
        def not_found(request: RequestContext):
            return f"No page at {request.path}"

        response = TestClient(app).get("/missing")
        assert response.status == 404
        assert response.text == "No page at /missing"

    def test_error_handler_receives_exception(self) -> None:
        app = App()

        @app.error(404)
        def not_found(request, exc):
            return exc.detail

        assert TestClient(app).get("/x").text == "Cannot GET /x"

    def test_error_handler_own_status(self) -> None:
        app = App()
        app.error(404)(lambda: ("gone", 410))
        assert TestClient(app).get("/x").status == 410

    def test_error_handler_for_exception_type(self) -> None:
        app = App()

        @app.get("/boom")
        def boom():
            raise ValueError("bad input")

        @app.error(ValueError)
        def bad_value(request, exc):
            return (f"invalid: {exc}", 400)

        response = TestClient(app).get("/boom")
        assert response.status == 400
        assert response.text == "invalid: bad input"

    def test_unhandled_exception_is_500(self) -> None:
        app = App()

        @app.get("/boom")
        def boom():
            raise RuntimeError("kaput")

        response = TestClient(app).get("/boom")
        assert response.status == 500
        assert response.text == "Internal Server Error"

    def test_debug_includes_exception(self) -> None:
        app = App(AppConfig(debug=True))

        @app.get("/boom")
        def boom():
            raise RuntimeError("kaput")

        assert "kaput" in TestClient(app).get("/boom").text

    def test_unhandled_exception_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        app = App()

        @app.get("/boom")
        def boom():
            raise RuntimeError("kaput")

        with caplog.at_level("ERROR", logger="waypoint.server"):
            TestClient(app).get("/boom")
        assert any("500 GET /boom" in record.getMessage() for record in caplog.records)

    def test_error_page_redirect(self) -> None:
        app = App(AppConfig(base_path="/site", error_pages={404: "/not-found"}))
        response = TestClient(app).get("/missing")
        assert response.status == 302
        assert response.header("Location") == "/site/not-found"

    def test_error_page_for_500(self) -> None:
        app = App(AppConfig(error_pages={500: "/oops"}))

        @app.get("/boom")
        def boom():
            raise RuntimeError("kaput")

        assert TestClient(app).get("/boom").header("Location") == "/oops"

    def test_error_handler_beats_error_page(self) -> None:
        app = App(AppConfig(error_pages={404: "/not-found"}))
        app.error(404)(lambda: "handled")
        response = TestClient(app).get("/missing")
        assert response.status == 404
        assert response.text == "handled"

    def test_unsupported_return_type_is_500(self) -> None:
        app = App()
        app.get("/")(lambda: object())
        assert TestClient(app).get("/").status == 500


class TestModulesAndGlobals:
    def test_register_and_get_module(self) -> None:
        app = App()
        db = object()
        app.register_module("db", db)
        assert app.get_module("db") is db
        assert app.get_module("cache") is None
        assert app.context.module("db") is db

    def test_shared_values_are_read_only(self) -> None:
        app = App()
        app.set_global("site", "Waypoint")
        shared = app.context.shared
        assert shared["site"] == "Waypoint"
        with pytest.raises(TypeError):
            shared["site"] = "other"  # type: ignore[index]

    def test_request_sees_app_context(self) -> None:
        app = App()

        @app.get("/")
        def index(request: RequestContext):
            return str(request.app is app.context)

        assert TestClient(app).get("/").text == "True"


class TestWSGIEntry:
    def test_app_is_wsgi_callable(self) -> None:
        app = App()
        app.get("/")(lambda: "hi")
        captured: list[str] = []

        def start_response(status: str, headers: list[tuple[str, str]]) -> None:
            captured.append(status)

        body = app({"REQUEST_METHOD": "GET", "PATH_INFO": "/"}, start_response)
        assert captured == ["200 OK"]
        assert b"".join(body) == b"hi"
