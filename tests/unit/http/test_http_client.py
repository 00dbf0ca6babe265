"""HTTP 客户端单元测试

请求通过 httpx.MockTransport 在进程内完成。
"""

import httpx
import pytest
import pytest_asyncio
import ujson
from pydantic import BaseModel

from apix.http.client import Client, Request, new_client_with_proxy
from apix.http.errors import UnsupportedMediaTypeError


class User(BaseModel):
    name: str
    age: int


def echo_handler(request: httpx.Request) -> httpx.Response:
    """回显请求方法、请求头与请求体"""
    return httpx.Response(
        200,
        json={
            "method": request.method,
            "headers": dict(request.headers),
            "body": request.content.decode(),
        },
    )


@pytest_asyncio.fixture
async def echo_client():
    client = Client(transport=httpx.MockTransport(echo_handler))
    yield client
    await client.aclose()


class TestRequest:
    """测试请求构建"""

    def test_headers(self):
        req = Request("get", "https://example.com/a")
        req.add_header("X-Tag", "a")
        req.add_header("X-Tag", "b")
        req.add_headers({"Accept": "application/json"})

        assert req.method == "GET"
        assert req.get_header("x-tag") == "a"
        assert req.headers.count(("X-Tag", "b")) == 1

        req.set_header("X-Tag", "c")
        assert [v for k, v in req.headers if k == "X-Tag"] == ["c"]

        req.del_header("ACCEPT")
        assert req.get_header("Accept") == ""

    def test_set_token(self):
        req = Request("GET", "https://example.com")
        req.set_token("abc")
        req.set_token("def")

        assert req.get_header("Authorization") == "Bearer def"

    @pytest.mark.parametrize("url", ["example.com/path", "http:///only-path", "not a url", ""])
    def test_invalid_url(self, url):
        with pytest.raises(httpx.InvalidURL):
            Request("GET", url)


class TestClient:
    """测试客户端请求方法"""

    @pytest.mark.asyncio
    async def test_get_with_token(self, echo_client):
        echo_client.set_token("secret-token")
        echo_client.headers["X-Client"] = "apix"

        resp = await echo_client.get("https://example.com/users")
        data = await resp.to_object()

        assert data["method"] == "GET"
        assert data["headers"]["authorization"] == "Bearer secret-token"
        assert data["headers"]["x-client"] == "apix"

    @pytest.mark.asyncio
    async def test_post_json(self, echo_client):
        resp = await echo_client.post_json("https://example.com/users", {"name": "张三"})
        data = await resp.to_object()

        assert data["headers"]["content-type"] == "application/json"
        assert ujson.loads(data["body"]) == {"name": "张三"}

    @pytest.mark.asyncio
    async def test_post_form(self, echo_client):
        resp = await echo_client.post_form("https://example.com/login", {"user": "a", "tags": ["x", "y"]})
        data = await resp.to_object()

        assert data["headers"]["content-type"] == "application/x-www-form-urlencoded"
        assert data["body"] == "user=a&tags=x&tags=y"

    @pytest.mark.asyncio
    async def test_cookies_persist(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/login":
                return httpx.Response(200, headers={"Set-Cookie": "session=s1; Path=/"})
            return httpx.Response(200, text=request.headers.get("cookie", ""))

        async with Client(transport=httpx.MockTransport(handler)) as client:
            await (await client.get("https://example.com/login")).to_bytes()
            resp = await client.get("https://example.com/me")

            assert await resp.to_string() == "session=s1"
            assert client.cookies.get("session") == "s1"

    @pytest.mark.asyncio
    async def test_follow_redirects(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(302, headers={"Location": "/new"})
            return httpx.Response(200, text=request.url.path)

        async with Client(transport=httpx.MockTransport(handler)) as client:
            resp = await client.get("https://example.com/old")

            assert resp.status_code == 200
            assert await resp.to_string() == "/new"

    def test_new_client_with_proxy(self):
        assert isinstance(new_client_with_proxy(""), Client)
        assert isinstance(new_client_with_proxy("http://127.0.0.1:8888"), Client)

    @pytest.mark.parametrize("proxy", ["127.0.0.1:8888", "http:///", "proxy host"])
    def test_new_client_with_invalid_proxy(self, proxy):
        with pytest.raises(httpx.InvalidURL):
            new_client_with_proxy(proxy)


class TestResponse:
    """测试响应解析"""

    @pytest.mark.asyncio
    async def test_to_object_model(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(
                200,
                content=b'{"name": "a", "age": 3}',
                headers={"Content-Type": "application/json; charset=utf-8"},
            )
        )
        async with Client(transport=transport) as client:
            user = await (await client.get("https://example.com/u")).to_object(User)

        assert user == User(name="a", age=3)

    @pytest.mark.asyncio
    async def test_to_object_xml(self):
        xml = b"<user><name>a</name><age>3</age><tag>x</tag><tag>y</tag></user>"
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, content=xml, headers={"Content-Type": "application/xml"})
        )
        async with Client(transport=transport) as client:
            data = await (await client.get("https://example.com/u.xml")).to_object()

        assert data == {"name": "a", "age": "3", "tag": ["x", "y"]}

    @pytest.mark.asyncio
    async def test_to_object_unsupported(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, text="hello", headers={"Content-Type": "text/plain"})
        )
        async with Client(transport=transport) as client:
            resp = await client.get("https://example.com/u")
            with pytest.raises(UnsupportedMediaTypeError):
                await resp.to_object()

        assert resp.http_response.is_closed


class TestSaveAsFile:
    """测试保存响应到文件"""

    @pytest.mark.asyncio
    async def test_extension_from_url(self, tmp_path):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"PNG"))
        async with Client(transport=transport) as client:
            written = await client.get_file("https://example.com/static/logo.png", str(tmp_path))

        assert written == 3
        assert (tmp_path / "logo.png").read_bytes() == b"PNG"

    @pytest.mark.asyncio
    async def test_extension_from_content_type(self, tmp_path):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, content=b"{}", headers={"Content-Type": "application/json"})
        )
        async with Client(transport=transport) as client:
            await client.get_file("https://example.com/export", str(tmp_path))

        assert (tmp_path / "export.json").exists()

    @pytest.mark.asyncio
    async def test_duplicate_names(self, tmp_path):
        """测试重名文件依次编号"""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"x"))
        async with Client(transport=transport) as client:
            for _ in range(3):
                await client.get_file("https://example.com/a.txt", str(tmp_path))

        assert sorted(p.name for p in tmp_path.iterdir()) == ["a(1).txt", "a(2).txt", "a.txt"]

    @pytest.mark.asyncio
    async def test_missing_directory(self, tmp_path):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"x"))
        async with Client(transport=transport) as client:
            resp = await client.get("https://example.com/a.txt")
            with pytest.raises(FileNotFoundError):
                await resp.save_as_file(str(tmp_path / "missing"))

        assert resp.http_response.is_closed
