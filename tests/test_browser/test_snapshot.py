"""Tests for page snapshots over static markup and over a live page."""

import pytest
from fakes import FakePage

from promoscope.browser.snapshot import ElementInfo, HTMLSnapshot, PlaywrightSnapshot

PAGE = """
<html>
<head>
  <title>  Midnight
     Drive </title>
  <meta property="og:title" content="  Midnight - Aria Vance ">
  <style>.hidden { display: none }</style>
  <script>var tracking = "should not be visible";</script>
</head>
<body>
  <div class="owner">
    <a href="/user/djmika">DJ Mika</a>
    <img src="avatar.jpg" width="40" srcset="avatar.jpg 1x, avatar@2x.jpg 2x">
  </div>
  <ul><li>One</li><li>Two</li><li>Three</li></ul>
</body>
</html>
"""


@pytest.fixture
def snapshot():
    return HTMLSnapshot(PAGE, "https://open.example.com/playlist/abc")


class TestHTMLSnapshot:
    @pytest.mark.asyncio
    async def test_query_resolves_urls(self, snapshot):
        link = await snapshot.query("a")
        image = await snapshot.query("img")
        assert link.href == "https://open.example.com/user/djmika"
        assert image.src == "https://open.example.com/playlist/avatar.jpg"
        assert image.srcset == "avatar.jpg 1x, avatar@2x.jpg 2x"
        assert image.width == 40

    @pytest.mark.asyncio
    async def test_query_missing_returns_none(self, snapshot):
        assert await snapshot.query("table") is None
        assert await snapshot.query_all("table") == []

    @pytest.mark.asyncio
    async def test_child_count_and_text(self, snapshot):
        listing = await snapshot.query("ul")
        assert listing.child_count == 3
        assert [li.text for li in await snapshot.query_all("li")] == ["One", "Two", "Three"]

    @pytest.mark.asyncio
    async def test_query_in_container(self, snapshot):
        avatar = await snapshot.query_in_container('a[href*="/user/"]', "div", "img")
        assert avatar is not None
        assert avatar.src.endswith("/avatar.jpg")
        assert await snapshot.query_in_container('a[href*="/user/"]', "section", "img") is None
        assert await snapshot.query_in_container("a.missing", "div", "img") is None

    @pytest.mark.asyncio
    async def test_visible_text_skips_scripts_and_styles(self, snapshot):
        text = await snapshot.visible_text()
        assert "DJ Mika" in text
        assert "Three" in text
        assert "tracking" not in text
        assert "display" not in text

    @pytest.mark.asyncio
    async def test_text_override(self):
        snapshot = HTMLSnapshot("<html></html>", "https://x.example/", text="1234 Total Visits")
        assert await snapshot.visible_text() == "1234 Total Visits"

    @pytest.mark.asyncio
    async def test_title_and_meta(self, snapshot):
        assert await snapshot.title() == "Midnight Drive"
        assert await snapshot.meta_content('meta[property="og:title"]') == "Midnight - Aria Vance"
        assert await snapshot.meta_content('meta[property="og:image"]') == ""

    @pytest.mark.asyncio
    async def test_no_pixels(self, snapshot):
        assert await snapshot.screenshot() == b""


class _EvaluatingPage(FakePage):
    def __init__(self, results):
        super().__init__()
        self.results = list(results)
        self.evaluated = []

    async def evaluate(self, script, arg=None):
        self.evaluated.append(arg)
        return self.results.pop(0)


class TestPlaywrightSnapshot:
    @pytest.mark.asyncio
    async def test_query_all_builds_element_info(self):
        page = _EvaluatingPage(
            [[{"tag": "img", "attributes": {"alt": "cover"}, "src": "https://a/b.jpg", "width": 300}]]
        )
        snapshot = PlaywrightSnapshot(page, "https://a/")
        elements = await snapshot.query_all("img")
        assert elements == [
            ElementInfo(tag="img", attributes={"alt": "cover"}, src="https://a/b.jpg", width=300)
        ]
        assert page.evaluated == [{"selector": "img"}]

    @pytest.mark.asyncio
    async def test_query_none(self):
        snapshot = PlaywrightSnapshot(_EvaluatingPage([None]), "https://a/")
        assert await snapshot.query("h1") is None

    @pytest.mark.asyncio
    async def test_evaluation_errors_propagate(self):
        class _BrokenPage(FakePage):
            async def evaluate(self, script, arg=None):
                raise RuntimeError("Execution context was destroyed")

        snapshot = PlaywrightSnapshot(_BrokenPage(), "https://a/")
        with pytest.raises(RuntimeError, match="context was destroyed"):
            await snapshot.visible_text()
